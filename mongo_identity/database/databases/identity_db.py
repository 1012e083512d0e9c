"""
Identity database configuration.
Stores user identity and authentication data.
"""
from pymongo import ASCENDING

DB_NAME = "IdentityDb"


class Collections:
    """Collection names in the identity database."""
    USERS = "AspNetUsers"


class Fields:
    """Stored field names queried by the user store."""
    ID = "_id"
    NORMALIZED_USER_NAME = "NormalizedUserName"
    NORMALIZED_EMAIL = "NormalizedEmail"
    ROLES = "Roles"
    CLAIMS = "Claims"
    CLAIM_TYPE = "ClaimType"
    CLAIM_VALUE = "ClaimValue"
    LOGINS = "Logins"
    LOGIN_PROVIDER = "LoginProvider"
    PROVIDER_KEY = "ProviderKey"


# Index manifest for the users collection
USER_INDEXES = [
    {"keys": [(Fields.NORMALIZED_USER_NAME, ASCENDING)], "unique": True},
    {"keys": [(Fields.NORMALIZED_EMAIL, ASCENDING)]},
]
