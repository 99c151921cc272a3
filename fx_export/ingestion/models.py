"""Data models shared across ingestion modules."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterator, Mapping

from fx_export.errors import DivisionError, ParseError


@dataclass(frozen=True, slots=True)
class RawSnapshot:
    """Historical snapshot returned by the rate provider for one base."""

    base: str
    timestamp: int
    rates: Mapping[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class ExchangeRate:
    """Canonical per currency-pair record written to storage.

    ``currencies_per_unit`` is the raw provider rate (``currency`` per one
    ``base``); ``units_per_currency`` is its inverse.
    """

    rate_date: date
    base: str
    currency: str
    units_per_currency: float
    currencies_per_unit: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.rate_date.isoformat(),
            "base": self.base,
            "currency": self.currency,
            "units_per_currency": self.units_per_currency,
            "currencies_per_unit": self.currencies_per_unit,
        }

    def to_json(self) -> str:
        """Return the compact single-line JSON form used in export blobs."""

        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ExchangeRate":
        try:
            return cls(
                rate_date=date.fromisoformat(payload["date"]),
                base=payload["base"],
                currency=payload["currency"],
                units_per_currency=float(payload["units_per_currency"]),
                currencies_per_unit=float(payload["currencies_per_unit"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Invalid exchange rate record: {payload!r}") from exc

    @classmethod
    def from_json(cls, line: str) -> "ExchangeRate":
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid exchange rate line: {line!r}") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"Exchange rate line is not an object: {line!r}")
        return cls.from_dict(payload)


def derive_records(snapshot: RawSnapshot, rate_date: date) -> list[ExchangeRate]:
    """Expand ``snapshot`` into one :class:`ExchangeRate` per quoted currency.

    A currency equal to the base is passed through unchanged. A zero rate
    raises :class:`DivisionError` instead of producing an infinite inverse.
    """

    return list(_iter_records(snapshot, rate_date))


def _iter_records(snapshot: RawSnapshot, rate_date: date) -> Iterator[ExchangeRate]:
    for currency, rate in snapshot.rates.items():
        if rate == 0:
            raise DivisionError(snapshot.base, currency)
        yield ExchangeRate(
            rate_date=rate_date,
            base=snapshot.base,
            currency=currency,
            units_per_currency=1 / rate,
            currencies_per_unit=rate,
        )


__all__ = ["RawSnapshot", "ExchangeRate", "derive_records"]
