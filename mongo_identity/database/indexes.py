"""
Index creation for the identity collections.
"""
import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from mongo_identity.database.databases import identity_db

logger = logging.getLogger(__name__)


async def create_user_indexes(collection: AsyncIOMotorCollection) -> list[dict[str, Any]]:
    """
    Create the users collection indexes one by one.

    A failing index does not prevent the others from being attempted.

    Args:
        collection: The AspNetUsers collection

    Returns:
        The manifest entries whose creation failed (empty on success)
    """
    failed: list[dict[str, Any]] = []
    for idx in identity_db.USER_INDEXES:
        options = {k: v for k, v in idx.items() if k != "keys"}
        try:
            name = await collection.create_index(idx["keys"], **options)
            logger.info(f"Index {name} ready on {collection.name}")
        except Exception as e:
            logger.warning(f"Index creation failed for {idx['keys']}: {e}")
            failed.append(idx)
    return failed
