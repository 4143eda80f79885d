"""Microsoft Graph API transport with bearer authentication and proxy support."""

from __future__ import annotations

import logging
import netrc
import re
from dataclasses import dataclass, field
from http.client import HTTPException
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlsplit

from shared_items import __version__
from shared_items.config import DEFAULT_GRAPH_BASE_URL, DEFAULT_PRODUCT_NAME, AppConfig
from shared_items.graph.errors import ConfigurationError, TransportError
from shared_items.graph.proxy import (
    ProxyCredentialResolver,
    ProxyCredentials,
    ProxyResolver,
    StaticProxyResolver,
    proxy_resolver_from_config,
)

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = DEFAULT_GRAPH_BASE_URL
DEFAULT_TIMEOUT_SECONDS = 30.0


def product_version(version: str = __version__) -> tuple[int, int, int, int]:
    """Split a package version into (major, minor, build, revision).

    Missing components are 0; pre-release or local suffixes are ignored,
    so "1.4" becomes (1, 4, 0, 0) and "2.0.1rc1" becomes (2, 0, 1, 0).
    """
    parts: list[int] = []
    for component in version.split(".")[:4]:
        match = re.match(r"\d+", component)
        if match is None:
            break
        parts.append(int(match.group()))
    parts.extend([0] * (4 - len(parts)))
    return parts[0], parts[1], parts[2], parts[3]


def user_agent(product_name: str, version: tuple[int, int, int, int]) -> str:
    major, minor, build, revision = version
    return f"{product_name} v{major}.{minor}.{build}.{revision}"


@dataclass(frozen=True)
class TransportSettings:
    """Proxy behaviour of a transport.

    ``use_proxy`` and ``use_default_credentials`` are independent flags:
    explicit credentials switch off default credentials even when no proxy
    endpoint was resolved.
    """

    use_proxy: bool
    proxy: str | None
    proxy_credentials: ProxyCredentials | None
    use_default_credentials: bool


def resolve_transport_settings(
    endpoint: str | None, credentials: ProxyCredentials | None
) -> TransportSettings:
    """Combine a resolved proxy endpoint and credentials into TransportSettings."""
    return TransportSettings(
        use_proxy=endpoint is not None,
        proxy=endpoint,
        proxy_credentials=credentials if endpoint is not None else None,
        use_default_credentials=credentials is None,
    )


@dataclass
class GraphClientOptions:
    """Collaborators and constants used to build a GraphTransport."""

    proxy_resolver: ProxyResolver = field(default_factory=StaticProxyResolver)
    credential_resolver: ProxyCredentialResolver = field(default_factory=StaticProxyResolver)
    base_url: str = GRAPH_BASE_URL
    product_name: str = DEFAULT_PRODUCT_NAME
    version: tuple[int, int, int, int] = field(default_factory=product_version)
    timeout: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class GraphResponse:
    """Status code and decoded body of a single Graph API response."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class GraphTransport:
    """HTTP transport bound to the Graph API root.

    Use as a context manager so the underlying opener is released on every
    exit path.
    """

    def __init__(
        self,
        opener: urllib_request.OpenerDirector,
        base_url: str,
        headers: dict[str, str],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._opener = opener
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers)
        self._timeout = timeout
        self.closed = False

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def url_for(self, target: str) -> str:
        """Return the absolute URL for a path or an already-absolute cursor."""
        if target.startswith(("https://", "http://")):
            return target
        if not target.startswith("/"):
            target = f"/{target}"
        return f"{self._base_url}{target}"

    def get(self, target: str) -> GraphResponse:
        """Perform a GET request against the Graph API.

        Non-2xx statuses are returned, not raised, so the caller decides how
        to treat them.

        Args:
            target: Path relative to the base URL, or an absolute cursor URL.

        Returns:
            The response status code and body.

        Raises:
            TransportError: If no complete response was received (connection
                failure, truncated body, timeout or cancellation).
        """
        req = urllib_request.Request(self.url_for(target), headers=self._headers, method="GET")
        try:
            status_code, body = self._open(req)
        except URLError as exc:
            logger.error("[get] request failed; target:%s;reason:%s", target, exc.reason)
            raise TransportError(None, str(exc.reason)) from exc
        except (OSError, HTTPException) as exc:
            logger.error("[get] request aborted; target:%s;error:%r", target, exc)
            raise TransportError(None, str(exc) or type(exc).__name__) from exc
        return GraphResponse(status_code, body.decode("utf-8", errors="replace"))

    def _open(self, req: urllib_request.Request) -> tuple[int, bytes]:
        """Send the request and read the whole body, for 2xx and error statuses alike."""
        try:
            with self._opener.open(req, timeout=self._timeout) as resp:
                return resp.status, resp.read()
        except HTTPError as exc:
            try:
                return exc.code, exc.read() or b""
            finally:
                exc.close()

    def close(self) -> None:
        if not self.closed:
            self._opener.close()
            self.closed = True

    def __enter__(self) -> GraphTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _proxy_url_with_credentials(proxy: str, credentials: ProxyCredentials) -> str:
    """Embed credentials as userinfo so urllib sends Proxy-Authorization."""
    if "://" not in proxy:
        proxy = f"http://{proxy}"
    parts = urlsplit(proxy)
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    userinfo = f"{quote(credentials.username, safe='')}:{quote(credentials.password, safe='')}"
    return f"{parts.scheme}://{userinfo}@{host}{parts.path}"


def _default_proxy_credentials(proxy: str) -> ProxyCredentials | None:
    """Look up ambient credentials for the proxy host in the user's netrc file."""
    host = urlsplit(proxy if "://" in proxy else f"http://{proxy}").hostname
    if not host:
        return None
    try:
        entry = netrc.netrc().authenticators(host)
    except (OSError, netrc.NetrcParseError):
        return None
    if entry is None:
        return None
    login, _, password = entry
    return ProxyCredentials(login, password or "")


def _proxy_handler(settings: TransportSettings) -> urllib_request.ProxyHandler:
    """Build the ProxyHandler for the given settings.

    A disabled proxy yields an empty mapping so environment proxies are not
    picked up behind the caller's back.
    """
    if not settings.use_proxy or settings.proxy is None:
        return urllib_request.ProxyHandler({})

    proxy = settings.proxy
    if settings.proxy_credentials is not None:
        proxy = _proxy_url_with_credentials(proxy, settings.proxy_credentials)
    elif settings.use_default_credentials and urlsplit(proxy).username is None:
        ambient = _default_proxy_credentials(proxy)
        if ambient is not None:
            proxy = _proxy_url_with_credentials(proxy, ambient)
    return urllib_request.ProxyHandler({"http": proxy, "https": proxy})


def create_graph_transport(
    access_token: str | None, options: GraphClientOptions | None = None
) -> GraphTransport:
    """Build a GraphTransport for a bearer token.

    Pure construction: the proxy collaborators are consulted but no request
    is made.

    Args:
        access_token: Bearer token sent in the Authorization header.
        options: Proxy collaborators and constants; defaults when omitted.

    Returns:
        A transport ready for GET requests.

    Raises:
        ConfigurationError: If the access token is missing or empty.
    """
    if not access_token:
        raise ConfigurationError("No valid access token available. Please authenticate first.")

    options = options or GraphClientOptions()
    settings = resolve_transport_settings(
        options.proxy_resolver.get_proxy_endpoint(),
        options.credential_resolver.get_proxy_credentials(),
    )
    logger.debug(
        "[create_graph_transport] transport settings; use_proxy:%s;explicit_credentials:%s;"
        "default_credentials:%s",
        settings.use_proxy,
        settings.proxy_credentials is not None,
        settings.use_default_credentials,
    )

    opener = urllib_request.build_opener(_proxy_handler(settings))
    headers = {
        "Accept": "application/json",
        "Authorization": f"Bearer {access_token}",
        "User-Agent": user_agent(options.product_name, options.version),
    }
    return GraphTransport(opener, options.base_url, headers, timeout=options.timeout)


def graph_client_options_from_config(config: AppConfig) -> GraphClientOptions:
    """Construct GraphClientOptions from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured GraphClientOptions instance.
    """
    resolver = proxy_resolver_from_config(config)
    return GraphClientOptions(
        proxy_resolver=resolver,
        credential_resolver=resolver,
        base_url=config.graph_base_url,
        product_name=config.product_name,
        timeout=config.request_timeout_seconds,
    )
