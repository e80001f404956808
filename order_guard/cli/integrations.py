# order_guard/cli/integrations.py
import asyncio

import click

from order_guard.core.exceptions import BaseServiceError
from order_guard.database import async_session
from order_guard.schemas.inventory import PlatformIntegrationUpdate
from order_guard.services.platform_integrations import PlatformIntegrationService


def _describe(integration) -> str:
    return (
        f"{integration.platform}: auto_block_low_stock={integration.auto_block_low_stock} "
        f"threshold={integration.low_stock_threshold} "
        f"auto_block_out_of_stock={integration.auto_block_out_of_stock} "
        f"notify={integration.notify_on_order_block} connected={integration.is_connected}"
    )


@click.command("platforms")
def list_platforms():
    """Show the blocking settings of every configured platform"""

    async def _list():
        async with async_session() as session:
            integrations = await PlatformIntegrationService(session).list_integrations()
        if not integrations:
            click.echo("No platforms configured; auto-blocking is off everywhere")
        for integration in integrations:
            click.echo(_describe(integration))

    asyncio.run(_list())


@click.command("configure-platform")
@click.option("--platform", required=True)
@click.option("--auto-block-low-stock/--no-auto-block-low-stock", default=None)
@click.option("--low-stock-threshold", type=click.IntRange(min=0), default=None)
@click.option("--auto-block-out-of-stock/--no-auto-block-out-of-stock", default=None)
@click.option("--notify/--no-notify", "notify_on_order_block", default=None)
@click.option("--connected/--disconnected", "is_connected", default=None)
def configure_platform(platform, **settings):
    """Create or update a platform's auto-block and notification settings"""
    changes = PlatformIntegrationUpdate(**{k: v for k, v in settings.items() if v is not None})

    async def _configure():
        async with async_session() as session:
            integration = await PlatformIntegrationService(session).upsert_integration(platform, changes)
            click.echo(_describe(integration))

    try:
        asyncio.run(_configure())
    except BaseServiceError as e:
        raise click.ClickException(str(e))
