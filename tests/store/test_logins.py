"""
Tests for embedded external logins and the login reverse lookup.
"""

import pytest

from mongo_identity.schemas.identity import UserLoginInfo


GOOGLE = UserLoginInfo(login_provider="Google", provider_key="g123", provider_display_name="Google")


class TestLoginMutations:
    """Tests for adding, removing and listing logins."""

    @pytest.mark.asyncio
    async def test_add_rejects_same_provider_and_key(self, user_store, make_user):
        user = make_user()

        await user_store.add_login(user, GOOGLE)
        await user_store.add_login(
            user,
            UserLoginInfo(login_provider="Google", provider_key="g123", provider_display_name="Other"),
        )

        assert await user_store.get_logins(user) == [GOOGLE]

    @pytest.mark.asyncio
    async def test_same_key_different_provider_is_distinct(self, user_store, make_user):
        user = make_user()
        github = UserLoginInfo(login_provider="GitHub", provider_key="g123")

        await user_store.add_login(user, GOOGLE)
        await user_store.add_login(user, github)

        assert await user_store.get_logins(user) == [GOOGLE, github]

    @pytest.mark.asyncio
    async def test_remove_requires_exact_pair(self, user_store, make_user):
        user = make_user()
        await user_store.add_login(user, GOOGLE)

        await user_store.remove_login(user, "Google", "other-key")
        assert len(await user_store.get_logins(user)) == 1

        await user_store.remove_login(user, "Google", "g123")
        assert await user_store.get_logins(user) == []

    @pytest.mark.asyncio
    async def test_login_arguments_validated(self, user_store, make_user):
        user = make_user()

        with pytest.raises(ValueError):
            await user_store.add_login(user, None)
        with pytest.raises(ValueError):
            await user_store.remove_login(user, "", "g123")
        with pytest.raises(ValueError):
            await user_store.remove_login(user, "Google", None)
        with pytest.raises(ValueError):
            await user_store.find_by_login("Google", "")


class TestFindByLogin:
    """Tests for the login reverse lookup."""

    @pytest.mark.asyncio
    async def test_add_find_remove_round_trip(self, user_store, make_user):
        """A linked login finds the user until it is removed and saved."""
        user = make_user()
        await user_store.add_login(user, GOOGLE)
        await user_store.create(user)

        found = await user_store.find_by_login("Google", "g123")
        assert found.id == user.id

        await user_store.remove_login(found, "Google", "g123")
        await user_store.update(found)

        assert await user_store.get_logins(found) == []
        assert await user_store.find_by_login("Google", "g123") is None

    @pytest.mark.asyncio
    async def test_same_entry_mode_ignores_split_match(self, user_store, make_user):
        """Provider and key from different logins do not match."""
        user = make_user()
        await user_store.add_login(user, GOOGLE)
        await user_store.add_login(user, UserLoginInfo(login_provider="GitHub", provider_key="h456"))
        await user_store.create(user)

        assert await user_store.find_by_login("Google", "h456") is None

    @pytest.mark.asyncio
    async def test_any_entry_mode_accepts_split_match(self, loose_user_store, make_user):
        user = make_user()
        await loose_user_store.add_login(user, GOOGLE)
        await loose_user_store.add_login(user, UserLoginInfo(login_provider="GitHub", provider_key="h456"))
        await loose_user_store.create(user)

        found = await loose_user_store.find_by_login("Google", "h456")

        assert found.id == user.id
