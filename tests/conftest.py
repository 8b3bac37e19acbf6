"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import main` to work when running
tests, simulating the Lambda environment where code is deployed from the src/
directory.
"""

import os
import sys
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add src/ to sys.path if missing.

    Code.from_asset("src") makes src/ the root of the Lambda package, so the
    handlers import `utils`, `models` and friends as top-level modules.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_str = str(repo_root / "src")
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Offline-friendly defaults so tests never need AWS or a ClickHouse server.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Lambda environment variables used by the store adapter
os.environ.setdefault("CLICKHOUSE_URL", "https://clickhouse.test:8443")
os.environ.setdefault("CLICKHOUSE_USERNAME", "default")
os.environ.setdefault("CLICKHOUSE_PASSWORD", "test")
os.environ.setdefault("TELEMETRY_TABLE", "default.request")

boto3.setup_default_session(region_name="eu-west-2")


@pytest.fixture(autouse=True)
def reset_repositories():
    """Drop the shared repository and the pooled client between tests."""
    from repositories import clickhouse_repo

    clickhouse_repo._repository = None
    clickhouse_repo._client = None
    yield
    clickhouse_repo._repository = None
    clickhouse_repo._client = None


def _make_event(path="/", method="GET", headers=None, query=None, domain="edge.example"):
    """Build a minimal API Gateway HTTP API (payload v2) event."""
    query = query or {}
    raw_query = "&".join(f"{k}={v}" for k, v in query.items())
    return {
        "version": "2.0",
        "rawPath": path,
        "rawQueryString": raw_query,
        "headers": headers or {},
        "queryStringParameters": query or None,
        "requestContext": {
            "domainName": domain,
            "http": {"method": method, "path": path},
        },
    }


@pytest.fixture
def make_event():
    """Factory for API Gateway events."""
    return _make_event
