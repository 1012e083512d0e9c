"""
Database module - MongoDB connections, database definitions and indexes.
"""
from mongo_identity.database.connections import (
    get_mongo_client,
    close_connections,
    get_database,
)
from mongo_identity.database.databases import identity_db
from mongo_identity.database.indexes import create_user_indexes

__all__ = [
    "get_mongo_client",
    "close_connections",
    "get_database",
    "identity_db",
    "create_user_indexes",
]
