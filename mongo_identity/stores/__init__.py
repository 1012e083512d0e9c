"""
User store and the capability protocols it implements.
"""
from mongo_identity.stores.protocols import (
    UserClaimStore,
    UserEmailStore,
    UserLockoutStore,
    UserLoginStore,
    UserPasswordStore,
    UserPhoneNumberStore,
    UserRoleStore,
    UserSecurityStampStore,
    UserStoreBase,
    UserTwoFactorStore,
)
from mongo_identity.stores.user_store import ReverseLookupMode, UserStore

__all__ = [
    "ReverseLookupMode",
    "UserStore",
    "UserStoreBase",
    "UserPasswordStore",
    "UserSecurityStampStore",
    "UserEmailStore",
    "UserPhoneNumberStore",
    "UserTwoFactorStore",
    "UserLockoutStore",
    "UserClaimStore",
    "UserRoleStore",
    "UserLoginStore",
]
