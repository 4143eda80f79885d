"""Integration tests for Microsoft Graph API connectivity.

These tests require a real delegated Graph access token and are skipped in
CI/CD unless the SF_GRAPH_ACCESS_TOKEN environment variable is set.
"""

import os

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("SF_GRAPH_ACCESS_TOKEN"),
    reason="Real Graph access token not available",
)


def test_fetch_collections_real() -> None:
    """Fetch both collections from the real Graph API.

    Asserts that each fetch returns a collection (possibly empty) without
    raising an exception.
    """
    from shared_items.auth.session import StaticTokenSession
    from shared_items.graph.client import GraphClientOptions
    from shared_items.graph.fetcher import fetch_following_items, fetch_shared_with_me_items
    from shared_items.graph.proxy import SystemProxyResolver

    session = StaticTokenSession(os.environ["SF_GRAPH_ACCESS_TOKEN"])
    resolver = SystemProxyResolver()
    options = GraphClientOptions(proxy_resolver=resolver, credential_resolver=resolver)

    following = fetch_following_items(session, options)
    shared = fetch_shared_with_me_items(session, options)

    assert isinstance(following.items, list)
    assert isinstance(shared.items, list)
