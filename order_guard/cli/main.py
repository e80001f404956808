# order_guard/cli/main.py
import click

from order_guard.cli.blocks import block, check, release_expired, unblock
from order_guard.cli.create_tables import create_tables
from order_guard.cli.integrations import configure_platform, list_platforms
from order_guard.core.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Order Guard administration commands"""
    configure_logging(log_level)


cli.add_command(create_tables)
cli.add_command(block)
cli.add_command(unblock)
cli.add_command(release_expired)
cli.add_command(check)
cli.add_command(list_platforms)
cli.add_command(configure_platform)


if __name__ == "__main__":
    cli()
