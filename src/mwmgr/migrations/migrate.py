"""
Database Migration Runner

Simple migration runner for the MW_MGR database.
"""
import asyncio
import logging
import sys
from pathlib import Path

import asyncpg

from ..config import Config

logger = logging.getLogger("mwmgr.migrations")


async def run_migrations(dsn: str = None) -> int:
    """Run all SQL migrations in order. Returns the number of failed files."""
    migrations_dir = Path(__file__).parent
    dsn = dsn or Config.get_postgres_dsn()

    conn = await asyncpg.connect(dsn)
    logger.info("Connected to database")

    failures = 0
    try:
        for sql_file in sorted(migrations_dir.glob("*.sql")):
            logger.info(f"Running migration: {sql_file.name}")
            sql = sql_file.read_text(encoding="utf-8")
            try:
                await conn.execute(sql)
                logger.info(f"{sql_file.name} completed")
            except asyncpg.PostgresError as e:
                # Continue with other migrations
                logger.error(f"Error in {sql_file.name}: {e}")
                failures += 1
    finally:
        await conn.close()

    return failures


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    try:
        failures = asyncio.run(run_migrations())
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Connection failed: {e}")
        sys.exit(1)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
