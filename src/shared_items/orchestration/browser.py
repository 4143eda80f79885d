"""Loads the items a user can browse, falling back between collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shared_items.graph.errors import ParseError, TransportError
from shared_items.graph.fetcher import PaginatedFetcher, paginated_fetcher_from_config
from shared_items.graph.models import ItemCollection

if TYPE_CHECKING:
    from shared_items.auth.session import AccessTokenSession
    from shared_items.config import AppConfig

logger = logging.getLogger(__name__)

SOURCE_SHARED_WITH_ME = "sharedWithMe"
SOURCE_FOLLOWING = "following"


@dataclass
class BrowseResult:
    """The collection that was loaded and which source it came from."""

    source: str
    items: ItemCollection


class SharedItemsBrowser:
    """Loads shared items, using followed items when sharing is unavailable."""

    def __init__(self, fetcher: PaginatedFetcher) -> None:
        self._fetcher = fetcher

    def load_items(self, session: AccessTokenSession) -> BrowseResult:
        """Load the shared-with-me collection, or the following collection as a fallback.

        Only load failures (transport or parsing) trigger the fallback. A
        missing token fails immediately because the second request would use
        the same session.

        Args:
            session: Supplies the bearer token.

        Returns:
            BrowseResult naming the source that succeeded.

        Raises:
            AuthenticationError: If the session has no access token.
            TransportError: If the fallback collection fails to load as well.
            ParseError: If the fallback collection fails to parse as well.
        """
        try:
            items = self._fetcher.fetch_shared_with_me_items(session)
            return BrowseResult(source=SOURCE_SHARED_WITH_ME, items=items)
        except (TransportError, ParseError) as exc:
            logger.warning(
                "[load_items] shared-with-me unavailable, falling back to following; error:%s",
                exc,
            )

        items = self._fetcher.fetch_following_items(session)
        return BrowseResult(source=SOURCE_FOLLOWING, items=items)


def shared_items_browser_from_config(config: AppConfig) -> SharedItemsBrowser:
    """Construct a SharedItemsBrowser from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured SharedItemsBrowser instance.
    """
    return SharedItemsBrowser(fetcher=paginated_fetcher_from_config(config))
