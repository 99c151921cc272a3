"""Client for the Open Exchange Rates historical snapshot API."""

from __future__ import annotations

from datetime import date
from numbers import Real
from typing import Any, Iterable, Mapping

import requests

from fx_export.errors import FetchError, ParseError
from fx_export.ingestion.models import ExchangeRate, RawSnapshot, derive_records
from fx_export.ingestion.strategy import SnapshotProvider
from fx_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

OXR_API_URL = "https://openexchangerates.org/api"
RECORD_SEPARATOR = b"\n"


def parse_snapshot(payload: Any) -> RawSnapshot:
    """Validate a decoded response body and return it as a :class:`RawSnapshot`."""

    if not isinstance(payload, Mapping):
        raise ParseError(f"Expected a JSON object, got {type(payload).__name__}")
    base = payload.get("base")
    if not isinstance(base, str) or not base:
        raise ParseError("Snapshot is missing a 'base' currency")
    timestamp = payload.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise ParseError(f"Snapshot for {base} has an invalid 'timestamp': {timestamp!r}")
    raw_rates = payload.get("rates")
    if not isinstance(raw_rates, Mapping):
        raise ParseError(f"Snapshot for {base} is missing a 'rates' object")
    rates: dict[str, float] = {}
    for currency, value in raw_rates.items():
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ParseError(f"Rate for {base}/{currency} is not a number: {value!r}")
        rates[currency] = float(value)
    return RawSnapshot(base=base, timestamp=timestamp, rates=rates)


def serialize_records(records: Iterable[ExchangeRate]) -> bytes:
    """Encode ``records`` as newline-delimited JSON without a trailing newline."""

    return RECORD_SEPARATOR.join(record.to_json().encode("utf-8") for record in records)


def fetch_and_serialize(provider: SnapshotProvider, rate_date: date, base: str) -> bytes:
    """Fetch one snapshot from ``provider`` and return its serialized records."""

    snapshot = provider.fetch_snapshot(rate_date, base)
    if snapshot.base != base:
        LOGGER.warning("Requested base %s but provider answered with %s", base, snapshot.base)
    records = derive_records(snapshot, rate_date)
    LOGGER.debug("Derived %s records for %s/%s", len(records), rate_date, base)
    return serialize_records(records)


class OpenExchangeRatesClient:
    """Fetch historical snapshots from openexchangerates.org."""

    def __init__(
        self,
        app_id: str,
        *,
        base_url: str = OXR_API_URL,
        timeout: float | None = 30,
        session: requests.Session | None = None,
    ) -> None:
        if not app_id:
            raise ValueError("An Open Exchange Rates app id is required")
        self.app_id = app_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "fx-export/1.0")

    def snapshot_url(self, rate_date: date) -> str:
        return f"{self.base_url}/historical/{rate_date.isoformat()}.json"

    def fetch_snapshot(self, rate_date: date, base: str) -> RawSnapshot:
        """Download the snapshot for ``rate_date`` quoted against ``base``."""

        url = self.snapshot_url(rate_date)
        try:
            response = self.session.get(
                url,
                params={"app_id": self.app_id, "base": base},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise FetchError(f"Failed to reach {url} for base {base}: {exc}") from exc
        self._raise_with_context(response, rate_date, base)
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(
                f"Rate provider returned an undecodable body for {rate_date}/{base}"
            ) from exc
        return parse_snapshot(payload)

    def fetch_and_serialize(self, rate_date: date, base: str) -> bytes:
        return fetch_and_serialize(self, rate_date, base)

    @staticmethod
    def _raise_with_context(response: requests.Response, rate_date: date, base: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            detail = ""
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, Mapping):
                message = body.get("description") or body.get("message")
                if message:
                    detail = f": {message}"
            raise FetchError(
                f"Rate provider responded with HTTP {response.status_code} "
                f"for {rate_date}/{base}{detail}"
            ) from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "OpenExchangeRatesClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "OXR_API_URL",
    "OpenExchangeRatesClient",
    "fetch_and_serialize",
    "parse_snapshot",
    "serialize_records",
]
