# order_guard/cli/create_tables.py
import asyncio
import click

from order_guard.database import Base, engine

# Import all models so they're registered with the Base
from order_guard import models  # noqa: F401


@click.command("create-tables")
def create_tables():
    """Create all database tables directly using SQLAlchemy"""

    async def _create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()
        click.echo("All tables created successfully!")

    asyncio.run(_create_tables())


if __name__ == "__main__":
    create_tables()
