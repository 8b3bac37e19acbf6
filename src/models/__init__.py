"""Pydantic models for telemetry records and API payloads."""

from models.response import PingResult  # noqa: F401
from models.telemetry import (  # noqa: F401
    CLOUDFRONT_HEADERS,
    HEADER_FIELDS,
    EdgeMetadata,
    RequestContext,
    TelemetryRecord,
)
