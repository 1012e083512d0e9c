"""
Tests for the user document model and its wire mapping.
"""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from mongo_identity.models.user import (
    IdentityUser,
    IdentityUserClaim,
    is_valid_object_id,
    normalize_name,
)
from mongo_identity.schemas.identity import IdentityResult, duplicate_user_name


class TestIdentityUser:
    """Tests for IdentityUser construction and serialization."""

    def test_new_user_gets_object_id(self):
        user = IdentityUser()

        assert is_valid_object_id(user.id)
        assert IdentityUser().id != user.id

    def test_collections_default_empty(self):
        user = IdentityUser(roles=None, claims=None, logins=None)

        assert user.roles == []
        assert user.claims == []
        assert user.logins == []

    def test_user_name_fills_normalized_name(self):
        assert IdentityUser(user_name="john").normalized_user_name == "JOHN"
        assert IdentityUser(user_name="john", normalized_user_name="custom").normalized_user_name == "custom"

    def test_id_is_frozen(self):
        user = IdentityUser()

        with pytest.raises(ValidationError):
            user.id = str(ObjectId())

    def test_malformed_id_rejected(self):
        with pytest.raises(ValidationError):
            IdentityUser(id="not-an-id")

    def test_object_id_accepted_from_driver(self):
        oid = ObjectId()

        assert IdentityUser.from_document({"_id": oid}).id == str(oid)

    def test_to_document_uses_stored_field_names(self):
        user = IdentityUser(
            user_name="john",
            claims=[IdentityUserClaim(claim_type="scope", claim_value="read")],
        )

        doc = user.to_document()

        assert doc["_id"] == user.id
        assert "id" not in doc
        assert doc["NormalizedUserName"] == "JOHN"
        assert doc["Claims"] == [{"ClaimType": "scope", "ClaimValue": "read"}]
        assert doc["Roles"] == [] and doc["Logins"] == []
        assert doc["AccessFailedCount"] == 0

    def test_from_document_ignores_extra_fields(self):
        user = IdentityUser(user_name="john")
        doc = user.to_document()
        doc["Nickname"] = "Johnny"

        assert IdentityUser.from_document(doc) == user

    def test_naive_lockout_end_read_as_utc(self):
        user = IdentityUser(lockout_end=datetime(2030, 1, 1, 8, 0, 0, 123456))

        assert user.lockout_end == datetime(2030, 1, 1, 8, 0, 0, 123000, tzinfo=timezone.utc)

    def test_lockout_end_keeps_offset_instant(self):
        end = datetime(2030, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        assert IdentityUser(lockout_end=end).lockout_end == datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_negative_access_failed_count_rejected(self):
        with pytest.raises(ValidationError):
            IdentityUser(access_failed_count=-1)

    @pytest.mark.parametrize("claim", [
        {"ClaimType": "scope", "ClaimValue": None},
        {"ClaimType": None, "ClaimValue": "read"},
        {"ClaimType": "scope"},
    ])
    def test_incomplete_embedded_claim_rejected(self, claim):
        """Claims read back must carry both a type and a value."""
        doc = IdentityUser(user_name="john").to_document()
        doc["Claims"] = [claim]

        with pytest.raises(ValidationError):
            IdentityUser.from_document(doc)

    def test_incomplete_embedded_login_rejected(self):
        doc = IdentityUser(user_name="john").to_document()
        doc["Logins"] = [{"LoginProvider": "Google", "ProviderKey": None}]

        with pytest.raises(ValidationError):
            IdentityUser.from_document(doc)

    def test_login_display_name_is_optional(self):
        doc = IdentityUser(user_name="john").to_document()
        doc["Logins"] = [{"LoginProvider": "Google", "ProviderKey": "g123"}]

        login = IdentityUser.from_document(doc).logins[0]

        assert login.provider_display_name is None


class TestHelpers:
    """Tests for small model helpers and results."""

    @pytest.mark.parametrize("value, expected", [
        ("507f1f77bcf86cd799439011", True),
        ("507f1f77bcf86cd79943901", False),
        ("zzzzzzzzzzzzzzzzzzzzzzzz", False),
        ("", False),
        (None, False),
    ])
    def test_is_valid_object_id(self, value, expected):
        assert is_valid_object_id(value) is expected

    def test_normalize_name(self):
        assert normalize_name("Admin") == "ADMIN"
        assert normalize_name(None) is None

    def test_identity_result(self):
        assert IdentityResult.success()
        failed = IdentityResult.failed(duplicate_user_name())
        assert not failed
        assert failed.errors[0].code == "DuplicateUserName"
