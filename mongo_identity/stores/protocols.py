"""
Storage capability protocols required by the authentication framework.

Each protocol covers one capability group so callers can depend on only
what they use. UserStore implements all of them against one collection.
"""
from datetime import datetime
from typing import Iterable, Optional, Protocol, runtime_checkable

from mongo_identity.core.cancellation import CancellationToken
from mongo_identity.models.user import IdentityUser
from mongo_identity.schemas.identity import Claim, IdentityResult, UserLoginInfo


@runtime_checkable
class UserStoreBase(Protocol):
    """Create, update, delete and find users."""

    async def create(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> IdentityResult: ...

    async def update(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> IdentityResult: ...

    async def delete(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> IdentityResult: ...

    async def find_by_id(
        self, user_id: str, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[IdentityUser]: ...

    async def find_by_name(
        self, normalized_user_name: str, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[IdentityUser]: ...

    async def get_user_id(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> str: ...

    async def get_user_name(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_user_name(
        self,
        user: IdentityUser,
        user_name: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_normalized_user_name(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_normalized_user_name(
        self,
        user: IdentityUser,
        normalized_name: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...


@runtime_checkable
class UserPasswordStore(Protocol):
    """Password hash storage."""

    async def get_password_hash(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_password_hash(
        self,
        user: IdentityUser,
        password_hash: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def has_password(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> bool: ...


@runtime_checkable
class UserSecurityStampStore(Protocol):
    """Security stamp storage."""

    async def get_security_stamp(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_security_stamp(
        self,
        user: IdentityUser,
        stamp: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...


@runtime_checkable
class UserEmailStore(Protocol):
    """Email, normalized email and confirmation flag storage."""

    async def get_email(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_email(
        self,
        user: IdentityUser,
        email: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_email_confirmed(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> bool: ...

    async def set_email_confirmed(
        self,
        user: IdentityUser,
        confirmed: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_normalized_email(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_normalized_email(
        self,
        user: IdentityUser,
        normalized_email: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def find_by_email(
        self, normalized_email: str, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[IdentityUser]: ...


@runtime_checkable
class UserPhoneNumberStore(Protocol):
    """Phone number and confirmation flag storage."""

    async def get_phone_number(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[str]: ...

    async def set_phone_number(
        self,
        user: IdentityUser,
        phone_number: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_phone_number_confirmed(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> bool: ...

    async def set_phone_number_confirmed(
        self,
        user: IdentityUser,
        confirmed: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...


@runtime_checkable
class UserTwoFactorStore(Protocol):
    """Two-factor flag storage."""

    async def get_two_factor_enabled(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> bool: ...

    async def set_two_factor_enabled(
        self,
        user: IdentityUser,
        enabled: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...


@runtime_checkable
class UserLockoutStore(Protocol):
    """Lockout state storage. Threshold policy belongs to the framework."""

    async def get_lockout_end_date(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[datetime]: ...

    async def set_lockout_end_date(
        self,
        user: IdentityUser,
        lockout_end: Optional[datetime],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_lockout_enabled(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> bool: ...

    async def set_lockout_enabled(
        self,
        user: IdentityUser,
        enabled: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_access_failed_count(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> int: ...

    async def increment_access_failed_count(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> int: ...

    async def reset_access_failed_count(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> None: ...


@runtime_checkable
class UserClaimStore(Protocol):
    """Embedded claims storage and claim reverse lookup."""

    async def get_claims(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> list[Claim]: ...

    async def add_claims(
        self,
        user: IdentityUser,
        claims: Iterable[Claim],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def replace_claim(
        self,
        user: IdentityUser,
        claim: Claim,
        new_claim: Claim,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def remove_claims(
        self,
        user: IdentityUser,
        claims: Iterable[Claim],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_users_for_claim(
        self, claim: Claim, cancellation_token: Optional[CancellationToken] = None
    ) -> list[IdentityUser]: ...


@runtime_checkable
class UserRoleStore(Protocol):
    """Embedded role name storage and role reverse lookup."""

    async def add_to_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def remove_from_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_roles(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> list[str]: ...

    async def is_in_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool: ...

    async def get_users_in_role(
        self, role_name: str, cancellation_token: Optional[CancellationToken] = None
    ) -> list[IdentityUser]: ...


@runtime_checkable
class UserLoginStore(Protocol):
    """Embedded external login storage and login reverse lookup."""

    async def add_login(
        self,
        user: IdentityUser,
        login: UserLoginInfo,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def remove_login(
        self,
        user: IdentityUser,
        login_provider: str,
        provider_key: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None: ...

    async def get_logins(
        self, user: IdentityUser, cancellation_token: Optional[CancellationToken] = None
    ) -> list[UserLoginInfo]: ...

    async def find_by_login(
        self,
        login_provider: str,
        provider_key: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[IdentityUser]: ...
