"""
Value types exchanged with the authentication framework.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Claim(BaseModel):
    """A (type, value) claim as seen by the authentication framework."""
    type: str = Field(..., description="Claim type, e.g. a URI or short name")
    value: str = Field(..., description="Claim value")

    model_config = ConfigDict(frozen=True)


class UserLoginInfo(BaseModel):
    """External login information."""
    login_provider: str = Field(..., description="Provider name, e.g. Google")
    provider_key: str = Field(..., description="User key at the provider")
    provider_display_name: Optional[str] = Field(None, description="Display name")

    model_config = ConfigDict(frozen=True)


class IdentityError(BaseModel):
    """Describes a failed identity operation."""
    code: Optional[str] = Field(None, description="Stable error code")
    description: str = Field(..., description="Human readable description")


class IdentityResult(BaseModel):
    """Outcome of a create, update or delete operation."""
    succeeded: bool = Field(..., description="Whether the operation succeeded")
    errors: list[IdentityError] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def __bool__(self) -> bool:
        return self.succeeded


def duplicate_user_name() -> IdentityError:
    """Error for a create that collides with an existing normalized user name."""
    return IdentityError(
        code="DuplicateUserName",
        description="Username is already taken.",
    )


def user_not_found() -> IdentityError:
    """Error for an update or delete whose user no longer exists."""
    return IdentityError(code="UserNotFound", description="User not found.")
