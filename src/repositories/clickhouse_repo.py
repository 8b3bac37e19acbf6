"""ClickHouse repository: the gateway's only path to the columnar store."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import clickhouse_connect
from clickhouse_connect.driver.client import Client
from clickhouse_connect.driver.exceptions import ClickHouseError

from config.settings import Settings
from models.response import PingResult
from models.telemetry import TelemetryRecord
from utils.error_handling import ConfigurationError, StoreError
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Pooled client reused across warm Lambda invocations.
_client: Optional[Client] = None


def get_store_client(settings: Settings) -> Client:
    """Get or create the shared ClickHouse client."""
    global _client
    if _client is None:
        if not settings.clickhouse_url:
            raise ConfigurationError("CLICKHOUSE_URL is not set")
        endpoint = urlparse(settings.clickhouse_url)
        try:
            _client = clickhouse_connect.get_client(
                host=endpoint.hostname,
                port=endpoint.port or 0,
                interface=endpoint.scheme or "https",
                username=settings.clickhouse_username,
                password=settings.clickhouse_password,
                connect_timeout=settings.connect_timeout,
                send_receive_timeout=settings.send_receive_timeout,
                # Sessions would serialize concurrent requests on one client.
                autogenerate_session_id=False,
            )
        except ClickHouseError as exc:
            raise StoreError(str(exc)) from exc
        logger.info("ClickHouse client created", extra={"host": endpoint.hostname})
    return _client


def reset_store_client() -> None:
    """Drop the shared client so the next call reconnects."""
    global _client
    if _client is not None:
        _client.close()
    _client = None


class ClickHouseRepository:
    """Thin wrapper around ping, query and async insert."""

    def __init__(self, client: Optional[Client] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_environment()
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_store_client(self.settings)
        return self._client

    def ping(self) -> PingResult:
        """Probe the store for liveness."""
        try:
            alive = self.client.ping()
        except ClickHouseError as exc:
            raise StoreError(str(exc)) from exc
        if not alive:
            return PingResult(success=False, error="ClickHouse did not answer ping")
        return PingResult(success=True)

    def query(self, sql: str) -> List[Dict[str, Any]]:
        """Run a read-only statement and return every row keyed by column name."""
        try:
            result = self.client.query(sql)
            return list(result.named_results())
        except ClickHouseError as exc:
            raise StoreError(str(exc)) from exc

    def insert(self, table: str, records: Iterable[TelemetryRecord]) -> None:
        """
        Submit records as JSONEachRow with async insert enabled.

        With wait_for_async_insert the call returns once the server has
        buffered the rows, not once they are flushed to a part.
        """
        payload = "\n".join(
            record.model_dump_json(by_alias=True) for record in records
        )
        try:
            self.client.raw_insert(
                table,
                insert_block=payload,
                settings=self.settings.insert_settings,
                fmt="JSONEachRow",
            )
        except ClickHouseError as exc:
            raise StoreError(str(exc)) from exc


# One repository per warm process, shared by every handler.
_repository: Optional[ClickHouseRepository] = None


def get_repository() -> ClickHouseRepository:
    """Get or create the shared repository."""
    global _repository
    if _repository is None:
        _repository = ClickHouseRepository()
    return _repository
