"""Unit tests for the settings documentation export."""

import json

from infrastructure.settings import CacheSettings, IdentitySettings, RemoteSettings
from infrastructure.settings_export import export_settings, get_model_metadata


def _property(metadata, env_var):
    return next(p for p in metadata["properties"] if p["env_var"] == env_var)


class TestGetModelMetadata:
    """Tests for per-class metadata extraction."""

    def test_env_vars_use_the_prefix(self):
        metadata = get_model_metadata(CacheSettings)

        assert metadata["prefix"] == "LEDGER_CACHE_"
        assert {p["env_var"] for p in metadata["properties"]} == {
            "LEDGER_CACHE_STALENESS_SECONDS",
            "LEDGER_CACHE_DEFAULT_WEEKLY_BUDGET",
        }

    def test_empty_secret_is_required(self):
        api_key = _property(get_model_metadata(RemoteSettings), "LEDGER_REMOTE_API_KEY")

        assert api_key["type"] == "Secret"
        assert api_key["required"] is True
        assert api_key["default"] is None

    def test_defaults_are_rendered(self):
        metadata = get_model_metadata(RemoteSettings)

        assert _property(metadata, "LEDGER_REMOTE_TIMEOUT_SECONDS")["default"] == "10.0"
        assert _property(metadata, "LEDGER_REMOTE_URL")["required"] is False

    def test_default_factory_lists_are_kept(self):
        algorithms = _property(get_model_metadata(IdentitySettings), "LEDGER_OIDC_ALGORITHMS")

        assert algorithms["default"] == ["RS256", "ES256"]


class TestExportSettings:
    def test_writes_json_document(self, tmp_path):
        output = tmp_path / "docs" / "env-vars.json"

        data = export_settings(output)

        assert json.loads(output.read_text()) == data
        assert set(data) == {"RemoteSettings", "StoreSettings", "CacheSettings", "IdentitySettings"}
