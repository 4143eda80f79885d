"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from shared_items.config import AppConfig, load_config
from shared_items.graph.client import GRAPH_BASE_URL, GraphClientOptions

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "SF_CLIENT_ID": "test-client-id",
    "SF_CLIENT_SECRET": "test-secret",
    "SF_TENANT_ID": "test-tenant-id",
}


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid")
        assert config.graph_base_url == "https://graph.microsoft.com/v1.0"
        assert config.graph_scopes == ("https://graph.microsoft.com/.default",)
        assert config.request_timeout_seconds == 30.0
        assert config.product_name == "Shared Items"
        assert config.proxy_url is None
        assert config.proxy_username is None
        assert config.proxy_password is None

    def test_is_frozen(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid")
        with pytest.raises(AttributeError):
            config.client_id = "other"  # type: ignore[misc]

    def test_defaults_match_graph_client_defaults(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid")
        options = GraphClientOptions()
        assert config.graph_base_url == GRAPH_BASE_URL == options.base_url
        assert config.product_name == options.product_name


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.client_id == "test-client-id"
        assert config.client_secret == "test-secret"
        assert config.tenant_id == "test-tenant-id"

    def test_optional_values_fall_back_to_defaults(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config == AppConfig(
            client_id="test-client-id", client_secret="test-secret", tenant_id="test-tenant-id"
        )

    def test_reads_optional_values_from_env(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "SF_GRAPH_BASE_URL": "https://graph.microsoft.us/v1.0",
            "SF_GRAPH_SCOPES": "Files.Read.All Sites.Read.All",
            "SF_REQUEST_TIMEOUT_SECONDS": "7.5",
            "SF_PRODUCT_NAME": "Contoso Sync",
            "SF_PROXY_URL": "http://proxy:8080",
            "SF_PROXY_USERNAME": "alice",
            "SF_PROXY_PASSWORD": "s3cret",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.graph_base_url == "https://graph.microsoft.us/v1.0"
        assert config.graph_scopes == ("Files.Read.All", "Sites.Read.All")
        assert config.request_timeout_seconds == 7.5
        assert config.product_name == "Contoso Sync"
        assert config.proxy_url == "http://proxy:8080"
        assert config.proxy_username == "alice"
        assert config.proxy_password == "s3cret"

    def test_empty_proxy_url_treated_as_unset(self) -> None:
        env = {**_REQUIRED_ENV, "SF_PROXY_URL": ""}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.proxy_url is None

    @pytest.mark.parametrize("missing", sorted(_REQUIRED_ENV))
    def test_raises_key_error_when_required_value_missing(self, missing: str) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != missing}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()
