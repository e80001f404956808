# order_guard/cli/blocks.py
import asyncio

import click

from order_guard.core.enums import BlockReason, BlockType
from order_guard.core.exceptions import BaseServiceError
from order_guard.database import async_session
from order_guard.services.availability import AvailabilityService
from order_guard.services.order_blocking import OrderBlockingService


@click.command("block")
@click.option("--product-id", required=True)
@click.option("--platform", required=True)
@click.option("--reason", type=click.Choice([r.value for r in BlockReason]), required=True)
@click.option("--block-type", type=click.Choice([t.value for t in BlockType]), default=BlockType.MANUAL.value)
@click.option("--custom-reason", default=None, help="Required when --reason=custom")
@click.option("--unblock-date", type=click.DateTime(), default=None, help="Expected lift time (UTC)")
@click.option("--notes", default=None)
@click.option("--created-by", default=None)
def block(product_id, platform, reason, block_type, custom_reason, unblock_date, notes, created_by):
    """Block future orders for a product on a platform"""

    async def _block():
        async with async_session() as session:
            record = await OrderBlockingService(session).block_orders(
                product_id,
                platform,
                reason,
                block_type,
                unblock_date=unblock_date,
                notes=notes,
                custom_reason=custom_reason,
                created_by=created_by,
            )
            click.echo(f"Blocked {product_id} on {platform} (block #{record.id}, {record.display_reason})")

    try:
        asyncio.run(_block())
    except BaseServiceError as e:
        raise click.ClickException(str(e))


@click.command("unblock")
@click.option("--product-id", required=True)
@click.option("--platform", required=True)
@click.option("--reason", default=None)
def unblock(product_id, platform, reason):
    """Lift the order block for a product on a platform"""

    async def _unblock():
        async with async_session() as session:
            closed = await OrderBlockingService(session).unblock_orders(product_id, platform, reason)
            if closed:
                click.echo(f"Unblocked {product_id} on {platform} ({closed} block closed)")
            else:
                click.echo(f"{product_id} on {platform} was not blocked")

    try:
        asyncio.run(_unblock())
    except BaseServiceError as e:
        raise click.ClickException(str(e))


@click.command("release-expired")
@click.option("--now", "now", type=click.DateTime(), default=None, help="Treat this UTC time as now")
def release_expired(now):
    """Lift every block whose auto-unblock date has passed"""

    async def _release():
        async with async_session() as session:
            released = await OrderBlockingService(session).release_expired_blocks(now)
        for product_id, platform in released:
            click.echo(f"Released {product_id} on {platform}")
        click.echo(f"{len(released)} block(s) released")

    asyncio.run(_release())


@click.command("check")
@click.option("--product-id", required=True)
@click.option("--platform", required=True)
@click.option("--quantity", type=int, default=1, show_default=True)
def check(product_id, platform, quantity):
    """Show whether an order could be fulfilled right now"""

    async def _check():
        async with async_session() as session:
            result = await AvailabilityService(session).check_order_availability(product_id, platform, quantity)
        if result.can_fulfill:
            click.echo(f"OK: {result.available_quantity} available, {quantity} requested")
        else:
            line = f"BLOCKED: {result.block_reason} ({result.available_quantity} available, {quantity} requested)"
            if result.estimated_restock_date:
                line += f", expected back {result.estimated_restock_date:%Y-%m-%d %H:%M}"
            click.echo(line)

    try:
        asyncio.run(_check())
    except BaseServiceError as e:
        raise click.ClickException(str(e))
