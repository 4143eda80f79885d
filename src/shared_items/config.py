"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_GRAPH_SCOPES = "https://graph.microsoft.com/.default"
DEFAULT_PRODUCT_NAME = "Shared Items"


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Domain constants
    have sensible defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    client_id: str
    client_secret: str
    tenant_id: str

    # Domain constants — defaults provided, overridable via env
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    graph_scopes: tuple[str, ...] = (DEFAULT_GRAPH_SCOPES,)
    request_timeout_seconds: float = 30.0
    product_name: str = DEFAULT_PRODUCT_NAME

    # Outbound proxy: unset means system proxy discovery
    proxy_url: str | None = None
    proxy_username: str | None = None
    proxy_password: str | None = None


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        SF_CLIENT_ID: Azure AD application (client) ID.
        SF_CLIENT_SECRET: Azure AD application client secret.
        SF_TENANT_ID: Azure AD tenant ID.

    Optional environment variables (with defaults):
        SF_GRAPH_BASE_URL: Graph API root (default: https://graph.microsoft.com/v1.0).
        SF_GRAPH_SCOPES: Space-separated scopes requested for Graph tokens.
        SF_REQUEST_TIMEOUT_SECONDS: Per-request socket timeout (default: 30).
        SF_PRODUCT_NAME: Product name sent in the User-Agent header.
        SF_PROXY_URL: Explicit outbound proxy; overrides system proxy discovery.
        SF_PROXY_USERNAME: Proxy user name (used only together with SF_PROXY_PASSWORD).
        SF_PROXY_PASSWORD: Proxy password (used only together with SF_PROXY_USERNAME).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        client_id=os.environ["SF_CLIENT_ID"],
        client_secret=os.environ["SF_CLIENT_SECRET"],
        tenant_id=os.environ["SF_TENANT_ID"],
        graph_base_url=os.environ.get("SF_GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL),
        graph_scopes=tuple(os.environ.get("SF_GRAPH_SCOPES", DEFAULT_GRAPH_SCOPES).split()),
        request_timeout_seconds=float(os.environ.get("SF_REQUEST_TIMEOUT_SECONDS", "30")),
        product_name=os.environ.get("SF_PRODUCT_NAME", DEFAULT_PRODUCT_NAME),
        proxy_url=os.environ.get("SF_PROXY_URL") or None,
        proxy_username=os.environ.get("SF_PROXY_USERNAME") or None,
        proxy_password=os.environ.get("SF_PROXY_PASSWORD") or None,
    )
