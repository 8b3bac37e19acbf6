"""Custom exceptions and helpers for the gateway's response envelope."""

import json
from typing import Any, Dict


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class StoreError(AppError):
    """Raised when ping, query or insert against the store fails."""

    def __init__(self, message: str = "Store request failed"):
        super().__init__(message, status_code=500)


class ConfigurationError(AppError):
    """Raised when the store endpoint or credentials are not configured."""

    def __init__(self, message: str = "Store is not configured"):
        super().__init__(message, status_code=500)


def text_response(status: int, body: str) -> Dict[str, Any]:
    """Format a plain-text API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "text/plain;charset=UTF-8"},
        "body": body,
    }


def _json_default(value: Any) -> Any:
    """Render store values json cannot encode: bytes as text, the rest via str()."""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def json_response(status: int, body: Any) -> Dict[str, Any]:
    """Format a JSON API Gateway HTTP API response.

    Store rows can carry dates, decimals and FixedString bytes.
    """
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=_json_default),
    }


def to_response(error: Exception) -> Dict[str, Any]:
    """Convert any failure into the single generic error response."""
    status = error.status_code if isinstance(error, AppError) else 500
    return text_response(status, f"Error: {error}")
