"""Telemetry record and request context models."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Record field -> request header it is copied from.
HEADER_FIELDS: Dict[str, str] = {
    "accept": "accept",
    "accept_encoding": "accept-encoding",
    "accept_language": "accept-language",
    "cache_control": "cache-control",
    "cf_connecting_ip": "cf-connecting-ip",
    "cf_ip_country": "cf-ipcountry",
    "cf_ray": "cf-ray",
    "cf_visitor": "cf-visitor",
    "connection": "connection",
    "host": "host",
    "pragma": "pragma",
    "priority": "priority",
    "sec_fetch_dest": "sec-fetch-dest",
    "sec_fetch_mode": "sec-fetch-mode",
    "sec_fetch_site": "sec-fetch-site",
    "sec_fetch_user": "sec-fetch-user",
    "upgrade_insecure_requests": "upgrade-insecure-requests",
    "user_agent": "user-agent",
    "x_forwarded_proto": "x-forwarded-proto",
    "x_real_ip": "x-real-ip",
}

# Edge attribute -> CloudFront viewer header carrying it.
CLOUDFRONT_HEADERS: Dict[str, str] = {
    "country": "cloudfront-viewer-country",
    "city": "cloudfront-viewer-city",
    "postal_code": "cloudfront-viewer-postal-code",
    "latitude": "cloudfront-viewer-latitude",
    "longitude": "cloudfront-viewer-longitude",
    "timezone": "cloudfront-viewer-time-zone",
    "region": "cloudfront-viewer-country-region-name",
    "region_code": "cloudfront-viewer-country-region",
    "metro_code": "cloudfront-viewer-metro-code",
    "colo": "x-amz-cf-pop",
}


# ASCII digits only; int() also accepts other Unicode digits.
_ASN = re.compile(r"[0-9]+")


def _blank_to_none(value):
    """Empty strings carry no information; store them as null."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class EdgeMetadata(BaseModel):
    """Network, geo and TLS attributes supplied by the hosting edge."""

    model_config = ConfigDict(frozen=True)

    asn: Optional[int] = None
    as_organization: Optional[str] = None
    colo: Optional[str] = None
    http_protocol: Optional[str] = None
    tls_version: Optional[str] = None
    tls_cipher: Optional[str] = None
    request_priority: Optional[str] = None
    edge_request_keep_alive_status: Optional[int] = None
    country: Optional[str] = None
    is_eu_country: Optional[str] = None
    continent: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None
    region: Optional[str] = None
    region_code: Optional[str] = None
    metro_code: Optional[str] = None
    host_metadata: Optional[str] = None
    client_accept_encoding: Optional[str] = None

    @classmethod
    def from_cloudfront_headers(cls, headers: Mapping[str, str]) -> "EdgeMetadata":
        """
        Build edge metadata from CloudFront viewer headers.

        Only the attributes CloudFront forwards are filled; anything missing or
        malformed stays None instead of failing the request.
        """
        lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
        values = {
            name: _blank_to_none(lowered.get(header))
            for name, header in CLOUDFRONT_HEADERS.items()
        }

        asn = _blank_to_none(lowered.get("cloudfront-viewer-asn"))
        values["asn"] = int(asn) if asn is not None and _ASN.fullmatch(asn.strip()) else None

        http_version = _blank_to_none(lowered.get("cloudfront-viewer-http-version"))
        values["http_protocol"] = f"HTTP/{http_version}" if http_version else None

        # "TLSv1.3:TLS_AES_128_GCM_SHA256:fullHandshake"
        tls = _blank_to_none(lowered.get("cloudfront-viewer-tls"))
        if tls:
            parts = tls.split(":")
            values["tls_version"] = _blank_to_none(parts[0])
            values["tls_cipher"] = _blank_to_none(parts[1]) if len(parts) > 1 else None

        return cls(**values)


class RequestContext(BaseModel):
    """Everything the record extractor reads, passed in explicitly."""

    url: Optional[str] = None
    method: Optional[str] = None
    path: str = "/"
    headers: Dict[str, str] = Field(default_factory=dict)
    query_params: Dict[str, str] = Field(default_factory=dict)
    redirect: Optional[str] = None
    body_used: bool = False
    edge: EdgeMetadata = Field(default_factory=EdgeMetadata)

    @field_validator("headers", mode="before")
    @classmethod
    def lower_header_names(cls, value):
        """Header lookups are case-insensitive."""
        return {str(k).lower(): v for k, v in (value or {}).items()}

    def header(self, name: str) -> Optional[str]:
        """Return a header value or None when absent or empty."""
        return _blank_to_none(self.headers.get(name.lower()))

    @classmethod
    def from_event(cls, event: dict) -> "RequestContext":
        """Build a context from an API Gateway HTTP API (payload v2) event."""
        request_context = event.get("requestContext") or {}
        http = request_context.get("http") or {}
        path = http.get("path") or event.get("rawPath") or "/"
        headers = event.get("headers") or {}
        raw_query = event.get("rawQueryString") or ""

        domain = request_context.get("domainName")
        if not domain:
            domain = {str(k).lower(): v for k, v in headers.items()}.get("host")
        url = None
        if domain:
            url = f"https://{domain}{event.get('rawPath') or path}"
            if raw_query:
                url = f"{url}?{raw_query}"

        return cls(
            url=url,
            method=http.get("method") or None,
            path=path,
            headers=headers,
            query_params=event.get("queryStringParameters") or {},
            edge=EdgeMetadata.from_cloudfront_headers(headers),
        )


class TelemetryRecord(BaseModel):
    """
    One row of the request table.

    Every field is always present; None means the value was unavailable for
    this request. Serialized keys are the camelCase column names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    # Edge-derived metadata
    asn: Optional[int] = None
    as_organization: Optional[str] = None
    colo: Optional[str] = None
    http_protocol: Optional[str] = None
    tls_version: Optional[str] = None
    tls_cipher: Optional[str] = None
    request_priority: Optional[str] = None
    edge_request_keep_alive_status: Optional[int] = None
    country: Optional[str] = None
    is_eu_country: Optional[str] = Field(default=None, alias="isEUCountry")
    continent: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None
    region: Optional[str] = None
    region_code: Optional[str] = None
    metro_code: Optional[str] = None
    timestamp: int
    host_metadata: Optional[str] = None
    client_accept_encoding: Optional[str] = None

    # Request-intrinsic
    request_url: Optional[str] = None
    request_method: Optional[str] = None
    request_redirect: Optional[str] = None
    body_used: Optional[bool] = None

    # Header-derived
    accept: Optional[str] = None
    accept_encoding: Optional[str] = None
    accept_language: Optional[str] = None
    cache_control: Optional[str] = None
    cf_connecting_ip: Optional[str] = None
    cf_ip_country: Optional[str] = None
    cf_ray: Optional[str] = None
    cf_visitor: Optional[str] = None
    connection: Optional[str] = None
    host: Optional[str] = None
    pragma: Optional[str] = None
    priority: Optional[str] = None
    sec_fetch_dest: Optional[str] = None
    sec_fetch_mode: Optional[str] = None
    sec_fetch_site: Optional[str] = None
    sec_fetch_user: Optional[str] = None
    upgrade_insecure_requests: Optional[str] = None
    user_agent: Optional[str] = None
    x_forwarded_proto: Optional[str] = None
    x_real_ip: Optional[str] = None

    def to_row(self) -> dict:
        """Column-name keyed mapping with every field present."""
        return self.model_dump(by_alias=True)
