"""Store probe result returned by /ping."""

from typing import Optional
from pydantic import BaseModel


class PingResult(BaseModel):
    """Liveness probe outcome, surfaced to the caller as-is."""

    success: bool
    error: Optional[str] = None
