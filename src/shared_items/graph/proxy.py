"""Outbound proxy providers injected into the Graph client factory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib import request as urllib_request
from urllib.parse import urlsplit

from shared_items.config import DEFAULT_GRAPH_BASE_URL, AppConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyCredentials:
    """Explicit user name and password for proxy authentication."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"ProxyCredentials(username={self.username!r}, password='***')"


class ProxyResolver(Protocol):
    def get_proxy_endpoint(self) -> str | None: ...


class ProxyCredentialResolver(Protocol):
    def get_proxy_credentials(self) -> ProxyCredentials | None: ...


class StaticProxyResolver:
    """Returns a fixed proxy endpoint and credentials."""

    def __init__(
        self,
        endpoint: str | None = None,
        credentials: ProxyCredentials | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._credentials = credentials

    def get_proxy_endpoint(self) -> str | None:
        return self._endpoint

    def get_proxy_credentials(self) -> ProxyCredentials | None:
        return self._credentials


class SystemProxyResolver:
    """Resolves the proxy endpoint from the system proxy settings.

    Uses the same discovery urllib does (environment variables, and the
    registry or System Configuration framework where available). HTTPS
    settings take precedence because the Graph API is served over HTTPS.
    No endpoint is returned when the bypass list (e.g. ``no_proxy``) names
    the API host.
    """

    def __init__(
        self,
        credentials: ProxyCredentials | None = None,
        base_url: str = DEFAULT_GRAPH_BASE_URL,
    ) -> None:
        self._credentials = credentials
        self._host = urlsplit(base_url).hostname or ""

    def get_proxy_endpoint(self) -> str | None:
        if self._host and urllib_request.proxy_bypass(self._host):
            logger.debug("[get_proxy_endpoint] proxy bypassed for host; host:%s", self._host)
            return None
        proxies = urllib_request.getproxies()
        endpoint = proxies.get("https") or proxies.get("http")
        if endpoint:
            logger.debug("[get_proxy_endpoint] system proxy discovered; proxy:%s", endpoint)
        return endpoint or None

    def get_proxy_credentials(self) -> ProxyCredentials | None:
        return self._credentials


def proxy_resolver_from_config(config: AppConfig) -> StaticProxyResolver | SystemProxyResolver:
    """Construct the proxy resolver described by application configuration.

    An explicit ``proxy_url`` wins over system discovery. Credentials are
    only used when both user name and password are configured.

    Args:
        config: Application configuration instance.

    Returns:
        A resolver implementing both ProxyResolver and ProxyCredentialResolver.
    """
    credentials = None
    if config.proxy_username and config.proxy_password:
        credentials = ProxyCredentials(config.proxy_username, config.proxy_password)

    if config.proxy_url:
        return StaticProxyResolver(endpoint=config.proxy_url, credentials=credentials)
    return SystemProxyResolver(credentials=credentials, base_url=config.graph_base_url)
