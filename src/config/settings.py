"""
Environment-specific configuration settings.

The store endpoint and credentials come from the Lambda environment, or from a
Secrets Manager secret when CLICKHOUSE_SECRET_ARN is set.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import boto3

from utils.logging_config import get_logger

logger = get_logger(__name__)

# Server-side batching: wait for the buffer to accept each insert and flush
# small batches after at most one second.
ASYNC_INSERT_SETTINGS: Dict[str, object] = {
    "async_insert": 1,
    "wait_for_async_insert": 1,
    "async_insert_max_data_size": "1000000",
    "async_insert_busy_timeout_ms": 1000,
}


@dataclass
class Settings:
    """Gateway settings with defaults suited to a dev stack."""

    # Environment
    environment: str = "dev"

    # ClickHouse endpoint, e.g. https://abc.eu-west-2.aws.clickhouse.cloud:8443
    clickhouse_url: Optional[str] = None
    clickhouse_username: str = "default"
    clickhouse_password: str = ""

    # Target table for inserts and the read path (never user-supplied)
    table: str = "default.request"

    # Client timeouts (seconds)
    connect_timeout: int = 10
    send_receive_timeout: int = 30

    insert_settings: Dict[str, object] = field(
        default_factory=lambda: dict(ASYNC_INSERT_SETTINGS)
    )

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        url = os.environ.get("CLICKHOUSE_URL")
        username = os.environ.get("CLICKHOUSE_USERNAME", "default")
        password = os.environ.get("CLICKHOUSE_PASSWORD", "")

        secret_arn = os.environ.get("CLICKHOUSE_SECRET_ARN")
        if secret_arn:
            secret = _load_secret(secret_arn)
            url = secret.get("url") or url
            username = secret.get("username") or username
            password = secret.get("password") or password

        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            clickhouse_url=url,
            clickhouse_username=username,
            clickhouse_password=password,
            table=os.environ.get("TELEMETRY_TABLE", "default.request"),
            connect_timeout=int(os.environ.get("CLICKHOUSE_CONNECT_TIMEOUT", "10")),
            send_receive_timeout=int(
                os.environ.get("CLICKHOUSE_SEND_RECEIVE_TIMEOUT", "30")
            ),
        )


def _load_secret(secret_arn: str) -> dict:
    """Read a JSON secret holding url/username/password."""
    try:
        sm = boto3.client("secretsmanager")
        secret_value = sm.get_secret_value(SecretId=secret_arn)["SecretString"]
        return json.loads(secret_value)
    except Exception as exc:
        logger.warning("Failed to load ClickHouse secret", extra={"error": str(exc)})
        return {}
