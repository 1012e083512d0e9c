"""
Value types and result schemas shared with the authentication framework.
"""
from mongo_identity.schemas.identity import (
    Claim,
    IdentityError,
    IdentityResult,
    UserLoginInfo,
    duplicate_user_name,
    user_not_found,
)

__all__ = [
    "Claim",
    "IdentityError",
    "IdentityResult",
    "UserLoginInfo",
    "duplicate_user_name",
    "user_not_found",
]
