"""
Pydantic models for identity documents.
"""
from mongo_identity.models.user import (
    IdentityUser,
    IdentityUserClaim,
    IdentityUserLogin,
    generate_user_id,
    is_valid_object_id,
    normalize_name,
    normalize_timestamp,
)

__all__ = [
    "IdentityUser",
    "IdentityUserClaim",
    "IdentityUserLogin",
    "generate_user_id",
    "is_valid_object_id",
    "normalize_name",
    "normalize_timestamp",
]
