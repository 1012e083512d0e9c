"""
User document model for the AspNetUsers collection.

Python attribute names are snake_case; the stored document uses the
PascalCase field names shared with other identity stores, and the
identifier is stored as the MongoDB primary key `_id`.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def generate_user_id() -> str:
    """Generate a new identifier compatible with MongoDB ObjectId."""
    return str(ObjectId())


def is_valid_object_id(value: Any) -> bool:
    """Check that a value is a 24-hex-character ObjectId string."""
    return isinstance(value, str) and ObjectId.is_valid(value)


def normalize_name(value: Optional[str]) -> Optional[str]:
    """Normalize a user name, email or role name for case-insensitive matching."""
    return value.upper() if value is not None else None


def normalize_timestamp(value: Optional[datetime]) -> Optional[datetime]:
    """
    Make a timestamp storable without loss.

    Naive values (as returned by the driver) are taken as UTC and the value
    is truncated to the millisecond precision of BSON datetimes.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


class IdentityUserClaim(BaseModel):
    """Claim embedded in a user document."""
    claim_type: str = Field(..., alias="ClaimType")
    claim_value: str = Field(..., alias="ClaimValue")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class IdentityUserLogin(BaseModel):
    """External login embedded in a user document."""
    login_provider: str = Field(..., alias="LoginProvider")
    provider_key: str = Field(..., alias="ProviderKey")
    provider_display_name: Optional[str] = Field(None, alias="ProviderDisplayName")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class IdentityUser(BaseModel):
    """
    User document model for the identity database.

    Roles, claims and logins are embedded arrays rather than join tables.
    """
    id: str = Field(
        default_factory=generate_user_id,
        alias="_id",
        frozen=True,
        description="MongoDB ObjectId as string",
    )
    user_name: Optional[str] = Field(None, alias="UserName")
    normalized_user_name: Optional[str] = Field(
        None,
        alias="NormalizedUserName",
        description="Upper-cased user name, unique across the collection",
    )
    email: Optional[str] = Field(None, alias="Email")
    normalized_email: Optional[str] = Field(None, alias="NormalizedEmail")
    email_confirmed: bool = Field(False, alias="EmailConfirmed")
    password_hash: Optional[str] = Field(None, alias="PasswordHash")
    security_stamp: Optional[str] = Field(None, alias="SecurityStamp")
    phone_number: Optional[str] = Field(None, alias="PhoneNumber")
    phone_number_confirmed: bool = Field(False, alias="PhoneNumberConfirmed")
    two_factor_enabled: bool = Field(False, alias="TwoFactorEnabled")
    lockout_end: Optional[datetime] = Field(
        None,
        alias="LockoutEnd",
        description="Timezone-aware end of the current lockout",
    )
    lockout_enabled: bool = Field(False, alias="LockoutEnabled")
    access_failed_count: int = Field(0, ge=0, alias="AccessFailedCount")
    roles: list[str] = Field(default_factory=list, alias="Roles")
    claims: list[IdentityUserClaim] = Field(default_factory=list, alias="Claims")
    logins: list[IdentityUserLogin] = Field(default_factory=list, alias="Logins")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_object_id(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        if not is_valid_object_id(value):
            raise ValueError(f"'{value}' is not a valid 24-character hex ObjectId")
        return value

    @field_validator("lockout_end", mode="after")
    @classmethod
    def _normalize_lockout_end(cls, value: Optional[datetime]) -> Optional[datetime]:
        return normalize_timestamp(value)

    @field_validator("roles", "claims", "logins", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _default_normalized_user_name(self) -> "IdentityUser":
        if self.user_name is not None and self.normalized_user_name is None:
            self.normalized_user_name = normalize_name(self.user_name)
        return self

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document shape."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "IdentityUser":
        """Build a user from a raw document returned by the driver."""
        return cls.model_validate(doc)
