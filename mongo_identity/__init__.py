"""
MongoDB identity store.

Persists authentication framework users as single documents with embedded
roles, claims and external logins.
"""
from mongo_identity.core import CancellationToken, OperationCancelledError, StoreDisposedError
from mongo_identity.models import IdentityUser, IdentityUserClaim, IdentityUserLogin
from mongo_identity.schemas import Claim, IdentityError, IdentityResult, UserLoginInfo
from mongo_identity.stores import ReverseLookupMode, UserStore

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "OperationCancelledError",
    "StoreDisposedError",
    "IdentityUser",
    "IdentityUserClaim",
    "IdentityUserLogin",
    "Claim",
    "IdentityError",
    "IdentityResult",
    "UserLoginInfo",
    "ReverseLookupMode",
    "UserStore",
]
