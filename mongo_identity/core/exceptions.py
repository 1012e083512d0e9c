"""
Exceptions raised by the identity store.

Not-found and duplicate-username conditions are reported through
IdentityResult failures, not exceptions. Driver errors propagate unchanged.
"""
import asyncio


class IdentityStoreError(Exception):
    """Base class for identity store errors."""


class StoreDisposedError(IdentityStoreError):
    """Raised when an operation is invoked on a disposed store."""

    def __init__(self, store_name: str = "UserStore"):
        self.store_name = store_name
        super().__init__(f"Cannot access a disposed object: {store_name}")


class OperationCancelledError(asyncio.CancelledError):
    """Raised when a CancellationToken cancels a store operation."""

    def __init__(self, message: str = "The operation was cancelled."):
        super().__init__(message)
