"""
Create any missing tables from the ORM metadata. Existing tables are left untouched.

Run once after configuring DATABASE_URL:
  python -m app.db.schema_check
"""
import asyncio
import logging
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

# Registers every model on Base.metadata
import app.auth.models  # noqa: F401
import app.core.models  # noqa: F401
from app.db.session import Base, engine

logger = logging.getLogger(__name__)


def _missing_tables(sync_conn) -> List[str]:
    existing = set(inspect(sync_conn).get_table_names())
    return [name for name in Base.metadata.tables if name not in existing]


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """Create missing tables in dependency order. Returns the names that were created."""
    async with db_engine.begin() as conn:
        missing = await conn.run_sync(_missing_tables)
        await conn.run_sync(Base.metadata.create_all)
    for name in missing:
        logger.info("Created table %s", name)
    return missing


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    created = await ensure_tables(engine)
    print(f"Schema check done; {len(created)} table(s) created.")


if __name__ == "__main__":
    asyncio.run(main())
