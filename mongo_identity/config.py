"""
Identity store configuration loaded from environment variables.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Identity store settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MongoDB
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    identity_db_name: str = Field(default="IdentityDb")

    # Store behaviour
    reverse_lookup_mode: str = Field(
        default="same_entry",
        description="same_entry or any_entry, see ReverseLookupMode",
    )
    create_indexes_on_startup: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
