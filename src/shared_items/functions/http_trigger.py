"""HTTP trigger blueprint — health check and collection endpoints."""

import json
import logging
from collections.abc import Callable

import azure.functions as func

from shared_items import __version__
from shared_items.auth.session import OnBehalfOfSession, msal_app_from_config
from shared_items.config import AppConfig, load_config
from shared_items.graph.errors import AuthenticationError, ParseError, TransportError
from shared_items.graph.fetcher import paginated_fetcher_from_config
from shared_items.orchestration.browser import (
    SOURCE_FOLLOWING,
    SOURCE_SHARED_WITH_ME,
    BrowseResult,
    shared_items_browser_from_config,
)

logger = logging.getLogger(__name__)

bp = func.Blueprint()

BEARER_PREFIX = "bearer "


def _json_response(payload: dict, status_code: int = 200) -> func.HttpResponse:  # type: ignore[type-arg]
    return func.HttpResponse(json.dumps(payload), status_code=status_code, mimetype="application/json")


def _error_response(message: str, status_code: int, **extra: object) -> func.HttpResponse:
    return _json_response({"status": "error", "message": message, **extra}, status_code)


def _bearer_token(req: func.HttpRequest) -> str | None:
    """Return the bearer token from the Authorization header, if any."""
    header = req.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


def _session_for(req: func.HttpRequest, config: AppConfig) -> OnBehalfOfSession | None:
    assertion = _bearer_token(req)
    if assertion is None:
        return None
    return OnBehalfOfSession(msal_app_from_config(config), assertion, config.graph_scopes)


def _serve_collection(
    route: str,
    req: func.HttpRequest,
    load: Callable[[AppConfig, OnBehalfOfSession], BrowseResult],
) -> func.HttpResponse:
    """Run a collection load and map the outcome to an HTTP response."""
    logger.info("[%s] collection requested", route)

    try:
        config = load_config()
        session = _session_for(req, config)
        if session is None:
            logger.warning("[%s] request without bearer token", route)
            return _error_response("Missing bearer token", 401)

        result = load(config, session)
        logger.info(
            "[%s] collection loaded; source:%s;item_count:%d",
            route,
            result.source,
            len(result.items),
        )
        return _json_response(
            {
                "status": "ok",
                "source": result.source,
                "count": len(result.items),
                "items": result.items.items,
            }
        )

    except AuthenticationError:
        logger.warning("[%s] no Graph token could be acquired for caller", route)
        return _error_response("Could not acquire a Graph access token", 401)

    except TransportError as exc:
        logger.error("[%s] Graph request failed; status:%s", route, exc.status_code)
        return _error_response(
            "Could not load this collection", 502, upstream_status=exc.status_code
        )

    except ParseError as exc:
        logger.error("[%s] Graph returned a malformed page; detail:%s", route, exc.detail)
        return _error_response("Could not load this collection", 502)

    except Exception:
        logger.error("[%s] collection request failed", route, exc_info=True)
        return _error_response("Internal server error", 500)


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint. Returns service status and version."""
    logger.info("[health_check] health check requested")

    try:
        return _json_response({"status": "ok", "version": __version__})

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        return _error_response("Internal server error", 500)


@bp.route(route="items/shared", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def shared_items(req: func.HttpRequest) -> func.HttpResponse:
    """Items shared with the calling user."""

    def load(config: AppConfig, session: OnBehalfOfSession) -> BrowseResult:
        items = paginated_fetcher_from_config(config).fetch_shared_with_me_items(session)
        return BrowseResult(source=SOURCE_SHARED_WITH_ME, items=items)

    return _serve_collection("shared_items", req, load)


@bp.route(route="items/following", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def following_items(req: func.HttpRequest) -> func.HttpResponse:
    """Items the calling user follows."""

    def load(config: AppConfig, session: OnBehalfOfSession) -> BrowseResult:
        items = paginated_fetcher_from_config(config).fetch_following_items(session)
        return BrowseResult(source=SOURCE_FOLLOWING, items=items)

    return _serve_collection("following_items", req, load)


@bp.route(route="items", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def browse_items(req: func.HttpRequest) -> func.HttpResponse:
    """Shared items, or followed items when the shared collection cannot be loaded."""

    def load(config: AppConfig, session: OnBehalfOfSession) -> BrowseResult:
        return shared_items_browser_from_config(config).load_items(session)

    return _serve_collection("browse_items", req, load)
