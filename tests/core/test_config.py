"""
Tests for settings, shared connections and the index entrypoint.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mongo_identity.config import Settings


@pytest.fixture
def reset_clients():
    import mongo_identity.database.connections as conn_module
    conn_module._mongo_clients.clear()
    yield conn_module
    conn_module._mongo_clients.clear()


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("MONGO_URI", "IDENTITY_DB_NAME", "REVERSE_LOOKUP_MODE", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.mongo_uri == "mongodb://localhost:27017"
        assert settings.identity_db_name == "IdentityDb"
        assert settings.reverse_lookup_mode == "same_entry"
        assert settings.create_indexes_on_startup is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db.internal:27017")
        monkeypatch.setenv("IDENTITY_DB_NAME", "Accounts")
        monkeypatch.setenv("CREATE_INDEXES_ON_STARTUP", "false")

        settings = Settings(_env_file=None)

        assert settings.mongo_uri == "mongodb://db.internal:27017"
        assert settings.identity_db_name == "Accounts"
        assert settings.create_indexes_on_startup is False


class TestConnections:
    """Tests for shared MongoDB clients."""

    def test_get_mongo_client_creates_once_per_uri(self, reset_clients):
        with patch("mongo_identity.database.connections.AsyncIOMotorClient") as mock_client:
            mock_client.side_effect = lambda uri: MagicMock(name=uri)

            first = reset_clients.get_mongo_client("mongodb://a:27017")
            again = reset_clients.get_mongo_client("mongodb://a:27017")
            other = reset_clients.get_mongo_client("mongodb://b:27017")

        assert first is again
        assert first is not other
        assert mock_client.call_count == 2

    def test_get_database_uses_settings_defaults(self, reset_clients):
        with patch("mongo_identity.database.connections.AsyncIOMotorClient") as mock_client, \
             patch("mongo_identity.database.connections.get_settings") as mock_settings:
            mock_settings.return_value.mongo_uri = "mongodb://test:27017"
            mock_settings.return_value.identity_db_name = "TestIdentity"

            reset_clients.get_database()

        mock_client.assert_called_once_with("mongodb://test:27017")
        mock_client.return_value.__getitem__.assert_called_once_with("TestIdentity")

    @pytest.mark.asyncio
    async def test_close_connections_cleans_up(self, reset_clients):
        mock_mongo = MagicMock()
        reset_clients._mongo_clients["mongodb://a:27017"] = mock_mongo

        await reset_clients.close_connections()

        mock_mongo.close.assert_called_once()
        assert reset_clients._mongo_clients == {}


class TestEnsureIndexesEntrypoint:
    """Tests for the operator index command."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ok, exit_code", [(True, 0), (False, 1)])
    async def test_main_exit_code(self, reset_clients, ok, exit_code):
        from mongo_identity import ensure_indexes

        with patch("mongo_identity.database.connections.AsyncIOMotorClient"), \
             patch.object(ensure_indexes.UserStore, "ensure_indexes", AsyncMock(return_value=ok)):
            assert await ensure_indexes.main() == exit_code

        assert reset_clients._mongo_clients == {}
