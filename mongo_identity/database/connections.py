"""
Database connection management for MongoDB.

Clients are shared per URI across every store instance; stores never close
them. Call close_connections() on application shutdown.
"""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from mongo_identity.config import get_settings

# Global connection instances, keyed by URI
_mongo_clients: dict[str, AsyncIOMotorClient] = {}


def get_mongo_client(uri: Optional[str] = None) -> AsyncIOMotorClient:
    """Get or create the shared MongoDB client for a URI."""
    if uri is None:
        uri = get_settings().mongo_uri
    client = _mongo_clients.get(uri)
    if client is None:
        client = AsyncIOMotorClient(uri)
        _mongo_clients[uri] = client
    return client


def get_database(
    db_name: Optional[str] = None,
    uri: Optional[str] = None,
) -> AsyncIOMotorDatabase:
    """Get a specific MongoDB database by name."""
    if db_name is None:
        db_name = get_settings().identity_db_name
    client = get_mongo_client(uri)
    return client[db_name]


async def close_connections() -> None:
    """Close all shared database connections."""
    while _mongo_clients:
        _, client = _mongo_clients.popitem()
        client.close()
