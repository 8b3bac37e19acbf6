"""
Ingest handler: the catch-all route.

Every request that is not /ping or /query becomes one telemetry record. The
response is returned only after the store has accepted the insert.
"""

from models.telemetry import RequestContext
from services.record_extractor import extract_record
from utils.error_handling import text_response
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _get_repository():
    """Lazy-load the shared ClickHouseRepository."""
    from repositories.clickhouse_repo import get_repository
    return get_repository()


def lambda_handler(event, context):
    """Extract a record from the request and insert it."""
    record = extract_record(RequestContext.from_event(event))
    repository = _get_repository()

    repository.insert(repository.settings.table, [record])

    logger.info(
        "Request recorded",
        extra={"table": repository.settings.table, "method": record.request_method},
    )
    return text_response(200, "Ok")
