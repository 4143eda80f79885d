"""Paginated fetching of Graph API drive-item collections."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from shared_items.graph.client import (
    GraphClientOptions,
    GraphTransport,
    create_graph_transport,
    graph_client_options_from_config,
)
from shared_items.graph.errors import AuthenticationError, TransportError
from shared_items.graph.models import ItemCollection, parse_page

if TYPE_CHECKING:
    from shared_items.auth.session import AccessTokenSession
    from shared_items.config import AppConfig

logger = logging.getLogger(__name__)

FOLLOWING_PATH = "/me/drive/following"
SHARED_WITH_ME_PATH = "/me/drive/sharedWithMe"

TransportFactory = Callable[[str, GraphClientOptions], GraphTransport]


class FetchState(enum.Enum):
    FETCHING = "fetching"
    DONE = "done"


class PaginatedFetcher:
    """Follows @odata.nextLink cursors and accumulates every page's items."""

    def __init__(
        self,
        options: GraphClientOptions | None = None,
        transport_factory: TransportFactory = create_graph_transport,
    ) -> None:
        """Initialise the fetcher.

        Args:
            options: Proxy collaborators and constants handed to the transport factory.
            transport_factory: Builds a transport for a bearer token.
        """
        self._options = options or GraphClientOptions()
        self._transport_factory = transport_factory

    def fetch(self, session: AccessTokenSession, start_path: str) -> ItemCollection:
        """Fetch a whole collection, page by page.

        Each cursor is used verbatim as the next request target. The first
        failure aborts the loop; no partial collection is ever returned.

        Args:
            session: Supplies the bearer token, read once per call.
            start_path: Collection path relative to the Graph API root.

        Returns:
            All items of the collection in page order (empty if there are none).

        Raises:
            AuthenticationError: If the session has no access token.
            ConfigurationError: If the transport cannot be built.
            TransportError: If a page request fails or returns a non-2xx status.
            ParseError: If a page body is not a valid collection page.
        """
        access_token = session.get_access_token()
        if not access_token:
            logger.error("[fetch] no access token available; start_path:%s", start_path)
            raise AuthenticationError("No valid access token available. Please authenticate first.")

        collection = ItemCollection()
        page_count = 0

        with self._transport_factory(access_token, self._options) as transport:
            pending = start_path
            state = FetchState.FETCHING
            while state is FetchState.FETCHING:
                response = transport.get(pending)
                page_count += 1
                if not response.ok:
                    logger.error(
                        "[fetch] page request failed; start_path:%s;page:%d;status:%d",
                        start_path,
                        page_count,
                        response.status_code,
                    )
                    raise TransportError(response.status_code, response.body)

                page = parse_page(response.body)
                collection.extend(page)
                logger.debug(
                    "[fetch] page received; start_path:%s;page:%d;item_count:%d;has_next:%s",
                    start_path,
                    page_count,
                    len(page.items),
                    page.has_next,
                )

                if page.next_link:
                    pending = page.next_link
                else:
                    state = FetchState.DONE

        logger.info(
            "[fetch] collection complete; start_path:%s;page_count:%d;item_count:%d",
            start_path,
            page_count,
            len(collection),
        )
        return collection

    def fetch_following_items(self, session: AccessTokenSession) -> ItemCollection:
        """Fetch the drive items the user follows."""
        return self.fetch(session, FOLLOWING_PATH)

    def fetch_shared_with_me_items(self, session: AccessTokenSession) -> ItemCollection:
        """Fetch the drive items shared with the user."""
        return self.fetch(session, SHARED_WITH_ME_PATH)


def fetch_following_items(
    session: AccessTokenSession, options: GraphClientOptions | None = None
) -> ItemCollection:
    return PaginatedFetcher(options).fetch_following_items(session)


def fetch_shared_with_me_items(
    session: AccessTokenSession, options: GraphClientOptions | None = None
) -> ItemCollection:
    return PaginatedFetcher(options).fetch_shared_with_me_items(session)


def paginated_fetcher_from_config(config: AppConfig) -> PaginatedFetcher:
    """Construct a PaginatedFetcher from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured PaginatedFetcher instance.
    """
    return PaginatedFetcher(options=graph_client_options_from_config(config))
