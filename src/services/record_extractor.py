"""
Record extraction.

Turns one request context into one telemetry record. No I/O happens here, and
a missing attribute never fails the request: it is recorded as null.
"""

from __future__ import annotations

import time
from typing import Optional

from models.telemetry import HEADER_FIELDS, RequestContext, TelemetryRecord


def extract_record(ctx: RequestContext, now: Optional[float] = None) -> TelemetryRecord:
    """Build the telemetry record for a request captured at ``now``."""
    captured_at = int(now if now is not None else time.time())

    values = ctx.edge.model_dump()
    values.update(
        timestamp=captured_at,
        request_url=ctx.url or None,
        request_method=ctx.method or None,
        request_redirect=ctx.redirect or None,
        body_used=ctx.body_used,
    )
    for field_name, header in HEADER_FIELDS.items():
        values[field_name] = ctx.header(header)

    return TelemetryRecord(**values)
