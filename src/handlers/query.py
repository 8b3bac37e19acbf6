"""
Bounded read handler for /query.

The only user input that reaches SQL is ``limit``, and it is clamped to an
integer before interpolation. Table and projection are fixed.
"""

from typing import Optional

from utils.error_handling import json_response
from utils.logging_config import get_logger
from utils.validators import sanitize_limit

logger = get_logger(__name__)

QUERY_TEMPLATE = "SELECT * FROM {table} LIMIT {limit:d}"


def _get_repository():
    """Lazy-load the shared ClickHouseRepository."""
    from repositories.clickhouse_repo import get_repository
    return get_repository()


def build_query(table: str, raw_limit: Optional[str]) -> str:
    """Render the fixed select statement with a sanitized limit."""
    return QUERY_TEMPLATE.format(table=table, limit=sanitize_limit(raw_limit))


def lambda_handler(event, context):
    """Return up to ``limit`` rows of the request table as a JSON array."""
    query_params = event.get("queryStringParameters") or {}
    repository = _get_repository()

    sql = build_query(repository.settings.table, query_params.get("limit"))
    rows = repository.query(sql)

    logger.info("Query served", extra={"row_count": len(rows)})
    return json_response(200, rows)
