"""
Operator entrypoint to (re)create the identity indexes.

Usage:
    python -m mongo_identity.ensure_indexes

Stores create their indexes in the background and only log failures; run
this after fixing whatever prevented index creation.
"""
import asyncio
import logging
import sys

from mongo_identity.config import get_settings
from mongo_identity.database.connections import close_connections
from mongo_identity.stores.user_store import UserStore

logger = logging.getLogger("mongo_identity.ensure_indexes")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def main() -> int:
    """Create the indexes once and return a process exit code."""
    settings = get_settings()
    store = UserStore.from_connection_string(
        settings.mongo_uri,
        settings.identity_db_name,
        create_indexes=False,
    )

    try:
        ok = await store.ensure_indexes()
    finally:
        store.dispose()
        await close_connections()

    if ok:
        logger.info("Identity indexes are in place")
        return 0
    logger.error("Some identity indexes could not be created, see warnings above")
    return 1


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    logger.info(f"Ensuring identity indexes on {get_settings().identity_db_name}")
    sys.exit(asyncio.run(main()))
