"""Abstractions for pluggable rate providers."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from fx_export.ingestion.models import RawSnapshot


class SnapshotProvider(Protocol):
    """Contract for fetching one historical snapshot.

    Concrete implementations retrieve the rates published for ``rate_date``
    expressed against ``base`` and return them as a :class:`RawSnapshot`.
    Implementations must tolerate concurrent calls from worker threads.
    """

    def fetch_snapshot(self, rate_date: date, base: str) -> RawSnapshot:
        ...  # pragma: no cover - protocol definition


__all__ = ["SnapshotProvider"]
