"""Store liveness handler for /ping."""

from utils.error_handling import json_response
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _get_repository():
    """Lazy-load the shared ClickHouseRepository."""
    from repositories.clickhouse_repo import get_repository
    return get_repository()


def lambda_handler(event, context):
    """Ping the store and return its probe result verbatim."""
    result = _get_repository().ping()
    logger.info("Store ping", extra={"success": result.success})
    return json_response(200, result.model_dump(exclude_none=True))
