"""Sessions that supply the bearer token used for Graph API requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import msal

if TYPE_CHECKING:
    from shared_items.config import AppConfig

logger = logging.getLogger(__name__)

AUTHORITY_BASE_URL = "https://login.microsoftonline.com"


class AccessTokenSession(Protocol):
    def get_access_token(self) -> str | None: ...


@dataclass(frozen=True)
class StaticTokenSession:
    """A session holding a token that was obtained elsewhere."""

    access_token: str | None

    def get_access_token(self) -> str | None:
        return self.access_token

    def __repr__(self) -> str:
        return f"StaticTokenSession(access_token={'***' if self.access_token else None})"


class OnBehalfOfSession:
    """Exchanges a caller's token for a Graph token via the MSAL on-behalf-of flow."""

    def __init__(
        self,
        app: msal.ConfidentialClientApplication,
        user_assertion: str,
        scopes: Sequence[str],
    ) -> None:
        """Initialise the session.

        Args:
            app: MSAL confidential client registered for the calling API.
            user_assertion: The bearer token the caller presented to this API.
            scopes: Graph scopes to request.
        """
        self._app = app
        self._user_assertion = user_assertion
        self._scopes = list(scopes)

    def get_access_token(self) -> str | None:
        """Acquire a Graph token for the caller.

        Returns:
            Access token string, or None if MSAL could not acquire one.
        """
        if not self._user_assertion:
            return None
        result: dict[str, Any] = (
            self._app.acquire_token_on_behalf_of(
                user_assertion=self._user_assertion, scopes=self._scopes
            )
            or {}
        )
        if "access_token" not in result:
            logger.error(
                "[get_access_token] MSAL on-behalf-of acquisition failed; error:%s;description:%s",
                result.get("error", "unknown_error"),
                result.get("error_description", "No description provided"),
            )
            return None
        return str(result["access_token"])


def msal_app_from_config(config: AppConfig) -> msal.ConfidentialClientApplication:
    """Construct the MSAL confidential client from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ConfidentialClientApplication instance.
    """
    return msal.ConfidentialClientApplication(
        client_id=config.client_id,
        client_credential=config.client_secret,
        authority=f"{AUTHORITY_BASE_URL}/{config.tenant_id}",
    )
