"""
MongoDB user store for the authentication framework.

Provides:
- User create/update/delete with structured IdentityResult failures
- Lookups by id, normalized user name, normalized email and external login
- In-memory accessors for credentials, contact info and lockout state
- Embedded roles, claims and logins with reverse lookups
- Best-effort background index creation
"""
import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from mongo_identity.config import Settings, get_settings
from mongo_identity.core.cancellation import CancellationToken, run_cancellable
from mongo_identity.core.exceptions import StoreDisposedError
from mongo_identity.database.connections import get_database
from mongo_identity.database.databases.identity_db import Collections, Fields
from mongo_identity.database.indexes import create_user_indexes
from mongo_identity.models.user import (
    IdentityUser,
    IdentityUserClaim,
    IdentityUserLogin,
    is_valid_object_id,
    normalize_name,
    normalize_timestamp,
)
from mongo_identity.schemas.identity import (
    Claim,
    IdentityResult,
    UserLoginInfo,
    duplicate_user_name,
    user_not_found,
)

logger = logging.getLogger(__name__)


class ReverseLookupMode(str, Enum):
    """How claim and login reverse lookups match embedded entries."""
    # One embedded entry must match every condition
    SAME_ENTRY = "same_entry"
    # Each condition may be met by a different embedded entry
    ANY_ENTRY = "any_entry"


class UserStore:
    """
    Identity user store backed by a single MongoDB collection.

    Implements every protocol in mongo_identity.stores.protocols. Mutators
    only change the in-memory user; persist them with update().
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        *,
        reverse_lookup_mode: ReverseLookupMode = ReverseLookupMode.SAME_ENTRY,
        create_indexes: bool = True,
    ):
        """
        Initialize with an already-configured database.

        Args:
            database: Motor database holding the users collection
            reverse_lookup_mode: Matching rule for claim and login reverse lookups
            create_indexes: Schedule background index creation on the running loop
        """
        if database is None:
            raise ValueError("database must not be None")

        self.db = database
        self.users_collection = database[Collections.USERS]
        self.reverse_lookup_mode = ReverseLookupMode(reverse_lookup_mode)
        self._disposed = False
        self._index_task: Optional[asyncio.Task] = None

        if create_indexes:
            self._index_task = self._schedule_index_creation()

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        database_name: str,
        **kwargs: Any,
    ) -> "UserStore":
        """Open (or reuse) the shared client for a URI and build a store on it."""
        if not connection_string:
            raise ValueError("connection_string must not be empty")
        if not database_name:
            raise ValueError("database_name must not be empty")
        return cls(get_database(database_name, uri=connection_string), **kwargs)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "UserStore":
        """Build a store from environment configuration."""
        settings = settings or get_settings()
        return cls.from_connection_string(
            settings.mongo_uri,
            settings.identity_db_name,
            reverse_lookup_mode=ReverseLookupMode(settings.reverse_lookup_mode),
            create_indexes=settings.create_indexes_on_startup,
        )

    # ==================== Indexes ====================

    @property
    def index_task(self) -> Optional[asyncio.Task]:
        """Background index creation task scheduled at construction, if any."""
        return self._index_task

    def _schedule_index_creation(self) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, index creation deferred to ensure_indexes()")
            return None
        return loop.create_task(self._create_indexes())

    async def _create_indexes(self) -> bool:
        failed = await create_user_indexes(self.users_collection)
        if failed:
            logger.warning(
                f"{len(failed)} index(es) missing on {Collections.USERS}, "
                f"store remains usable; rerun ensure_indexes() to retry"
            )
        return not failed

    async def ensure_indexes(self) -> bool:
        """
        Create the users collection indexes.

        Failures are logged, never raised.

        Returns:
            True if every index is in place, False otherwise
        """
        self._throw_if_disposed()
        return await self._create_indexes()

    # ==================== Lifecycle ====================

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Mark the store disposed. The shared client stays open."""
        self._disposed = True
        if self._index_task is not None and not self._index_task.done():
            self._index_task.cancel()

    def __enter__(self) -> "UserStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.dispose()

    async def __aenter__(self) -> "UserStore":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.dispose()

    def _throw_if_disposed(self) -> None:
        if self._disposed:
            raise StoreDisposedError(type(self).__name__)

    def _begin(self, cancellation_token: Optional[CancellationToken]) -> None:
        self._throw_if_disposed()
        if cancellation_token is not None:
            cancellation_token.raise_if_cancellation_requested()

    def _begin_user(
        self,
        user: Optional[IdentityUser],
        cancellation_token: Optional[CancellationToken],
    ) -> None:
        """Check disposal, then the user argument, then cancellation."""
        self._throw_if_disposed()
        self._require(user, "user")
        if cancellation_token is not None:
            cancellation_token.raise_if_cancellation_requested()

    @staticmethod
    def _require(value: Any, name: str) -> None:
        if value is None:
            raise ValueError(f"{name} must not be None")

    @staticmethod
    def _require_text(value: Optional[str], name: str) -> None:
        if not value:
            raise ValueError(f"{name} must not be None or empty")

    async def _find_one(
        self,
        query: dict[str, Any],
        cancellation_token: Optional[CancellationToken],
    ) -> Optional[IdentityUser]:
        doc = await run_cancellable(
            self.users_collection.find_one(query),
            cancellation_token,
        )
        if not doc:
            return None
        return IdentityUser.from_document(doc)

    async def _find_many(
        self,
        query: dict[str, Any],
        cancellation_token: Optional[CancellationToken],
    ) -> list[IdentityUser]:
        cursor = self.users_collection.find(query)
        docs = await run_cancellable(cursor.to_list(length=None), cancellation_token)
        return [IdentityUser.from_document(doc) for doc in docs]

    # ==================== Users ====================

    async def create(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Insert a new user document.

        Args:
            user: User to persist

        Returns:
            IdentityResult, failed with DuplicateUserName if the normalized
            user name is already taken

        Raises:
            PyMongoError: For any other insert fault
        """
        self._begin_user(user, cancellation_token)

        try:
            await run_cancellable(
                self.users_collection.insert_one(user.to_document()),
                cancellation_token,
            )
        except DuplicateKeyError:
            logger.debug(f"Duplicate key inserting user {user.id}")
            return IdentityResult.failed(duplicate_user_name())

        return IdentityResult.success()

    async def update(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Replace the stored document with the in-memory user. No upsert.

        Args:
            user: User previously loaded from this store

        Returns:
            IdentityResult, failed with UserNotFound if nothing matched
        """
        self._begin_user(user, cancellation_token)

        result = await run_cancellable(
            self.users_collection.replace_one(
                {Fields.ID: user.id},
                user.to_document(),
                upsert=False,
            ),
            cancellation_token,
        )

        if result.matched_count == 0:
            return IdentityResult.failed(user_not_found())
        return IdentityResult.success()

    async def delete(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Delete the stored document for a user.

        Args:
            user: User to delete

        Returns:
            IdentityResult, failed with UserNotFound if nothing was deleted
        """
        self._begin_user(user, cancellation_token)

        result = await run_cancellable(
            self.users_collection.delete_one({Fields.ID: user.id}),
            cancellation_token,
        )

        if result.deleted_count == 0:
            return IdentityResult.failed(user_not_found())
        return IdentityResult.success()

    async def find_by_id(
        self,
        user_id: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[IdentityUser]:
        """
        Get user by ID.

        Args:
            user_id: User ObjectId as string

        Returns:
            IdentityUser or None if not found or the id is malformed
        """
        self._begin(cancellation_token)

        # Malformed ids never reach the database
        if not is_valid_object_id(user_id):
            return None

        return await self._find_one({Fields.ID: user_id}, cancellation_token)

    async def find_by_name(
        self,
        normalized_user_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[IdentityUser]:
        """Get user by normalized user name."""
        self._begin(cancellation_token)
        self._require_text(normalized_user_name, "normalized_user_name")
        return await self._find_one(
            {Fields.NORMALIZED_USER_NAME: normalized_user_name},
            cancellation_token,
        )

    async def get_user_id(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> str:
        self._begin_user(user, cancellation_token)
        return user.id or ""

    async def get_user_name(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.user_name

    async def set_user_name(
        self,
        user: IdentityUser,
        user_name: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.user_name = user_name

    async def get_normalized_user_name(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.normalized_user_name

    async def set_normalized_user_name(
        self,
        user: IdentityUser,
        normalized_name: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.normalized_user_name = normalized_name

    # ==================== Password & Security Stamp ====================

    async def get_password_hash(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.password_hash

    async def set_password_hash(
        self,
        user: IdentityUser,
        password_hash: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.password_hash = password_hash

    async def has_password(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        return user.password_hash is not None

    async def get_security_stamp(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.security_stamp

    async def set_security_stamp(
        self,
        user: IdentityUser,
        stamp: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.security_stamp = stamp

    # ==================== Email ====================

    async def get_email(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.email

    async def set_email(
        self,
        user: IdentityUser,
        email: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.email = email

    async def get_email_confirmed(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        return user.email_confirmed

    async def set_email_confirmed(
        self,
        user: IdentityUser,
        confirmed: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.email_confirmed = confirmed

    async def get_normalized_email(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.normalized_email

    async def set_normalized_email(
        self,
        user: IdentityUser,
        normalized_email: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.normalized_email = normalized_email

    async def find_by_email(
        self,
        normalized_email: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[IdentityUser]:
        """Get the first user with a normalized email. Emails are not unique."""
        self._begin(cancellation_token)
        self._require_text(normalized_email, "normalized_email")
        return await self._find_one(
            {Fields.NORMALIZED_EMAIL: normalized_email},
            cancellation_token,
        )

    # ==================== Phone & Two-Factor ====================

    async def get_phone_number(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._begin_user(user, cancellation_token)
        return user.phone_number

    async def set_phone_number(
        self,
        user: IdentityUser,
        phone_number: Optional[str],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.phone_number = phone_number

    async def get_phone_number_confirmed(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        return user.phone_number_confirmed

    async def set_phone_number_confirmed(
        self,
        user: IdentityUser,
        confirmed: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.phone_number_confirmed = confirmed

    async def get_two_factor_enabled(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        return user.two_factor_enabled

    async def set_two_factor_enabled(
        self,
        user: IdentityUser,
        enabled: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.two_factor_enabled = enabled

    # ==================== Lockout ====================

    async def get_lockout_end_date(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[datetime]:
        self._begin_user(user, cancellation_token)
        return user.lockout_end

    async def set_lockout_end_date(
        self,
        user: IdentityUser,
        lockout_end: Optional[datetime],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.lockout_end = normalize_timestamp(lockout_end)

    async def get_lockout_enabled(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        return user.lockout_enabled

    async def set_lockout_enabled(
        self,
        user: IdentityUser,
        enabled: bool,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.lockout_enabled = enabled

    async def get_access_failed_count(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> int:
        self._begin_user(user, cancellation_token)
        return user.access_failed_count

    async def increment_access_failed_count(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> int:
        """Increment the failed access counter and return the new value."""
        self._begin_user(user, cancellation_token)
        user.access_failed_count += 1
        return user.access_failed_count

    async def reset_access_failed_count(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        user.access_failed_count = 0

    # ==================== Claims ====================

    async def get_claims(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> list[Claim]:
        self._begin_user(user, cancellation_token)
        return [Claim(type=c.claim_type, value=c.claim_value) for c in user.claims]

    async def add_claims(
        self,
        user: IdentityUser,
        claims: Iterable[Claim],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        """Append claims, skipping any (type, value) pair the user already holds."""
        self._begin_user(user, cancellation_token)
        self._require(claims, "claims")

        for claim in claims:
            if not any(_claim_matches(c, claim) for c in user.claims):
                user.claims.append(
                    IdentityUserClaim(claim_type=claim.type, claim_value=claim.value)
                )

    async def replace_claim(
        self,
        user: IdentityUser,
        claim: Claim,
        new_claim: Claim,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        """Overwrite the first embedded claim matching `claim`. No-op if absent."""
        self._begin_user(user, cancellation_token)
        self._require(claim, "claim")
        self._require(new_claim, "new_claim")

        existing = next((c for c in user.claims if _claim_matches(c, claim)), None)
        if existing is not None:
            existing.claim_type = new_claim.type
            existing.claim_value = new_claim.value

    async def remove_claims(
        self,
        user: IdentityUser,
        claims: Iterable[Claim],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        self._require(claims, "claims")

        for claim in claims:
            user.claims = [c for c in user.claims if not _claim_matches(c, claim)]

    async def get_users_for_claim(
        self,
        claim: Claim,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> list[IdentityUser]:
        """
        Get all users holding a claim.

        Args:
            claim: Claim type and value to look for

        Returns:
            Matching users, matched per reverse_lookup_mode
        """
        self._begin(cancellation_token)
        self._require(claim, "claim")

        query = self._embedded_match(
            Fields.CLAIMS,
            {Fields.CLAIM_TYPE: claim.type, Fields.CLAIM_VALUE: claim.value},
        )
        return await self._find_many(query, cancellation_token)

    # ==================== Roles ====================

    async def add_to_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        """Add the normalized role name unless an equivalent one is present."""
        self._begin_user(user, cancellation_token)
        self._require_text(role_name, "role_name")

        if not _contains_role(user.roles, role_name):
            user.roles.append(normalize_name(role_name))

    async def remove_from_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        self._require_text(role_name, "role_name")

        folded = role_name.casefold()
        user.roles = [r for r in user.roles if r.casefold() != folded]

    async def get_roles(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> list[str]:
        self._begin_user(user, cancellation_token)
        return list(user.roles)

    async def is_in_role(
        self,
        user: IdentityUser,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._begin_user(user, cancellation_token)
        self._require_text(role_name, "role_name")
        return _contains_role(user.roles, role_name)

    async def get_users_in_role(
        self,
        role_name: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> list[IdentityUser]:
        """
        Get all users in a role.

        The role name is normalized before an exact match, so any casing
        finds members whose roles were written by add_to_role().
        """
        self._begin(cancellation_token)
        self._require_text(role_name, "role_name")

        return await self._find_many(
            {Fields.ROLES: normalize_name(role_name)},
            cancellation_token,
        )

    # ==================== Logins ====================

    async def add_login(
        self,
        user: IdentityUser,
        login: UserLoginInfo,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        """Append an external login unless the provider and key are already linked."""
        self._begin_user(user, cancellation_token)
        self._require(login, "login")

        if not any(
            _login_matches(entry, login.login_provider, login.provider_key)
            for entry in user.logins
        ):
            user.logins.append(
                IdentityUserLogin(
                    login_provider=login.login_provider,
                    provider_key=login.provider_key,
                    provider_display_name=login.provider_display_name,
                )
            )

    async def remove_login(
        self,
        user: IdentityUser,
        login_provider: str,
        provider_key: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self._begin_user(user, cancellation_token)
        self._require_text(login_provider, "login_provider")
        self._require_text(provider_key, "provider_key")

        user.logins = [
            entry for entry in user.logins
            if not _login_matches(entry, login_provider, provider_key)
        ]

    async def get_logins(
        self,
        user: IdentityUser,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> list[UserLoginInfo]:
        self._begin_user(user, cancellation_token)
        return [
            UserLoginInfo(
                login_provider=entry.login_provider,
                provider_key=entry.provider_key,
                provider_display_name=entry.provider_display_name,
            )
            for entry in user.logins
        ]

    async def find_by_login(
        self,
        login_provider: str,
        provider_key: str,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[IdentityUser]:
        """
        Get the user linked to an external login.

        Args:
            login_provider: Provider name
            provider_key: User key at the provider

        Returns:
            First matching user (per reverse_lookup_mode) or None
        """
        self._begin(cancellation_token)
        self._require_text(login_provider, "login_provider")
        self._require_text(provider_key, "provider_key")

        query = self._embedded_match(
            Fields.LOGINS,
            {Fields.LOGIN_PROVIDER: login_provider, Fields.PROVIDER_KEY: provider_key},
        )
        return await self._find_one(query, cancellation_token)

    def _embedded_match(self, array_field: str, conditions: dict[str, Any]) -> dict[str, Any]:
        """Build a filter on an embedded array according to reverse_lookup_mode."""
        if self.reverse_lookup_mode is ReverseLookupMode.SAME_ENTRY:
            return {array_field: {"$elemMatch": conditions}}
        return {
            "$and": [
                {array_field: {"$elemMatch": {field: value}}}
                for field, value in conditions.items()
            ]
        }


def _claim_matches(entry: IdentityUserClaim, claim: Claim) -> bool:
    return entry.claim_type == claim.type and entry.claim_value == claim.value


def _login_matches(entry: IdentityUserLogin, login_provider: str, provider_key: str) -> bool:
    return entry.login_provider == login_provider and entry.provider_key == provider_key


def _contains_role(roles: list[str], role_name: str) -> bool:
    folded = role_name.casefold()
    return any(r.casefold() == folded for r in roles)
