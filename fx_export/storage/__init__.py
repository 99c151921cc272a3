"""Blob layout shared by the storage backends and the warehouse load."""

from __future__ import annotations

import gzip
from datetime import date
from typing import Final

__all__ = [
    "RATES_PREFIX",
    "EXPORT_FILENAME",
    "destination_path",
    "wildcard_path",
    "encode_payload",
]

RATES_PREFIX: Final[str] = "rates"
EXPORT_FILENAME: Final[str] = "export.json.gz"


def destination_path(rate_date: date, base: str) -> str:
    """Return ``rates/YYYY/MM/DD/<base>/export.json.gz`` for one work unit."""

    return f"{RATES_PREFIX}/{rate_date:%Y/%m/%d}/{base}/{EXPORT_FILENAME}"


def wildcard_path() -> str:
    """Return the object pattern matching every exported blob."""

    return f"{RATES_PREFIX}/*"


def encode_payload(payload: bytes, *, compress: bool = False) -> bytes:
    """Return ``payload`` as stored, gzip-compressed when ``compress`` is set.

    The default keeps the historical behaviour of writing plain NDJSON under
    a ``.gz`` name.
    """

    if not compress:
        return payload
    # mtime=0 keeps re-runs byte-identical
    return gzip.compress(payload, mtime=0)
