"""
Single entrypoint Lambda that routes every request to one of three handlers.

Routing is an exact lookup on the path: /ping and /query have their own
handlers, everything else (any method, any other path) is ingested.
"""

from enum import Enum
from typing import Callable, Dict

from . import health_check, ingest, query
from utils.error_handling import to_response
from utils.logging_config import get_logger

logger = get_logger(__name__)


class Route(str, Enum):
    """Branches the dispatcher can select."""

    HEALTH = "health"
    QUERY = "query"
    INGEST = "ingest"


ROUTES: Dict[str, Route] = {
    "/ping": Route.HEALTH,
    "/query": Route.QUERY,
}


def resolve_route(path: str) -> Route:
    """Exact path match; anything unknown is ingested."""
    return ROUTES.get(path, Route.INGEST)


def _handler_for(route: Route) -> Callable:
    if route is Route.HEALTH:
        return health_check.lambda_handler
    if route is Route.QUERY:
        return query.lambda_handler
    return ingest.lambda_handler


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    All three branches share one error boundary: any failure, from the store
    or from serialization, becomes a 500 whose body is the error message.
    """
    route = None
    try:
        http = (event.get("requestContext") or {}).get("http") or {}
        path = http.get("path") or event.get("rawPath") or "/"
        route = resolve_route(path)
        return _handler_for(route)(event, context)
    except Exception as exc:
        logger.exception(
            "Request failed",
            extra={"route": route.value if route else None, "error": str(exc)},
        )
        return to_response(exc)
