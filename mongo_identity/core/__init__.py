"""
Core utilities: cancellation and store exceptions.
"""
from mongo_identity.core.cancellation import CancellationToken
from mongo_identity.core.exceptions import (
    IdentityStoreError,
    OperationCancelledError,
    StoreDisposedError,
)

__all__ = [
    "CancellationToken",
    "IdentityStoreError",
    "OperationCancelledError",
    "StoreDisposedError",
]
