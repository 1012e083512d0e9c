"""
Global test fixtures for the identity store.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor)
- Stores with their indexes in place
- User factories
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from mongo_identity.database.databases import identity_db
from mongo_identity.models.user import IdentityUser
from mongo_identity.stores.user_store import ReverseLookupMode, UserStore


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.
    """
    from mongomock_motor import AsyncMongoMockClient
    client = AsyncMongoMockClient()
    yield client
    client.close()


@pytest_asyncio.fixture
async def mock_identity_db(mock_async_mongo_client):
    """Provide mock identity database."""
    yield mock_async_mongo_client[identity_db.DB_NAME]


@pytest.fixture
def mock_users_collection():
    """
    A MagicMock collection for injecting driver faults.

    Driver methods are AsyncMock so they can be awaited like Motor's.
    """
    collection = MagicMock()
    collection.name = identity_db.Collections.USERS
    collection.insert_one = AsyncMock()
    collection.replace_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.create_index = AsyncMock(side_effect=lambda keys, **kw: f"{keys[0][0]}_1")
    return collection


@pytest.fixture
def mock_database(mock_users_collection):
    """A MagicMock database whose only collection is mock_users_collection."""
    db = MagicMock()
    db.__getitem__.return_value = mock_users_collection
    return db


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def user_store(mock_identity_db):
    """A store on the mock database with its indexes created."""
    store = UserStore(mock_identity_db)
    await store.index_task
    yield store
    store.dispose()


@pytest_asyncio.fixture
async def loose_user_store(mock_identity_db):
    """A store using independent per-field reverse lookup matching."""
    store = UserStore(mock_identity_db, reverse_lookup_mode=ReverseLookupMode.ANY_ENTRY)
    await store.index_task
    yield store
    store.dispose()


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def make_user():
    """Factory for users with normalized name and email filled in."""
    def _make(user_name: str = "john", email: str | None = None, **kwargs) -> IdentityUser:
        email = email or f"{user_name}@example.com"
        return IdentityUser(
            user_name=user_name,
            email=email,
            normalized_email=email.upper(),
            **kwargs,
        )
    return _make
