"""Runtime configuration for an export run."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from fx_export.ingestion.openexchangerates import OXR_API_URL
from fx_export.utils.date_range import backward_window, default_end_date

__all__ = [
    "DEFAULT_BASES",
    "DEFAULT_DELTA",
    "ExportConfig",
    "StorageLocation",
    "StorageScheme",
    "parse_bases",
]

DEFAULT_DELTA = 3
DEFAULT_BASES: tuple[str, ...] = ("SGD",)
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


class StorageScheme(str, Enum):
    """Supported object storage targets."""

    GCS = "gs"
    LOCAL = "file"

    @classmethod
    def from_scheme(cls, scheme: str) -> "StorageScheme":
        """Normalise URL schemes into a StorageScheme value."""

        scheme_lower = (scheme or "").lower()
        if scheme_lower in {"gs", "gcs"}:
            return cls.GCS
        if scheme_lower == "file":
            return cls.LOCAL
        raise ValueError(
            f"Unsupported storage scheme {scheme!r}. Use a bucket name, gs://bucket or file:///path."
        )


@dataclass(slots=True, frozen=True)
class StorageLocation:
    """Where export blobs are written: a GCS bucket or a local directory."""

    scheme: StorageScheme
    location: str

    @classmethod
    def from_url(cls, url: str) -> "StorageLocation":
        """Parse ``my-bucket``, ``gs://my-bucket`` or ``file:///some/dir``."""

        cleaned = (url or "").strip()
        if not cleaned:
            raise ValueError("A storage bucket or URL is required")
        if "://" not in cleaned:
            return cls(scheme=StorageScheme.GCS, location=cleaned.strip("/"))
        parsed = urlparse(cleaned)
        scheme = StorageScheme.from_scheme(parsed.scheme)
        if scheme is StorageScheme.GCS:
            if not parsed.netloc:
                raise ValueError(f"GCS URL must name a bucket: {url}")
            if parsed.path.strip("/"):
                raise ValueError(f"GCS URL must not include an object path: {url}")
            return cls(scheme=scheme, location=parsed.netloc)
        local_path = parsed.path or parsed.netloc
        if not local_path:
            raise ValueError(f"file:// URL must include a directory: {url}")
        return cls(scheme=scheme, location=str(Path(local_path)))

    @property
    def is_gcs(self) -> bool:
        return self.scheme is StorageScheme.GCS

    def uri(self, path: str = "") -> str:
        root = f"gs://{self.location}" if self.is_gcs else f"file://{self.location}"
        return f"{root}/{path}" if path else root

    def __str__(self) -> str:
        return self.uri()


def parse_bases(value: str | Iterable[str]) -> tuple[str, ...]:
    """Split, normalise and de-duplicate base currency codes."""

    raw = value.split(",") if isinstance(value, str) else list(value)
    bases: list[str] = []
    for item in raw:
        code = item.strip().upper()
        if not code:
            continue
        if not _CURRENCY_CODE.match(code):
            raise ValueError(f"Invalid base currency code: {item!r}")
        if code not in bases:
            bases.append(code)
    if not bases:
        raise ValueError("At least one base currency is required")
    return tuple(bases)


@dataclass(slots=True)
class ExportConfig:
    """Every option an export run needs, built once and passed explicitly."""

    end_date: date = field(default_factory=default_end_date)
    delta: int = DEFAULT_DELTA
    bases: tuple[str, ...] = DEFAULT_BASES
    app_id: str | None = None
    storage: StorageLocation | None = None
    project: str | None = None
    dataset: str | None = None
    table: str | None = None
    key_path: Path | None = None
    provider_url: str = OXR_API_URL
    timeout: float | None = 30
    compress: bool = False
    skip_load: bool = False
    dry_run: bool = False
    write_disposition: str = "WRITE_TRUNCATE"

    def window(self) -> list[date]:
        """Dates to export, most recent first."""

        return backward_window(self.end_date, self.delta)

    def validate(self) -> "ExportConfig":
        if self.delta < 0:
            raise ValueError("delta must not be negative")
        self.bases = parse_bases(self.bases)
        if self.dry_run:
            return self
        if self.key_path is not None and not Path(self.key_path).expanduser().is_file():
            raise ValueError(f"Google key file not found: {self.key_path}")
        if not self.app_id:
            raise ValueError("An Open Exchange Rates app id is required (--app or OXR_APP_ID)")
        if self.storage is None:
            raise ValueError("A storage bucket is required (--bucket or FX_EXPORT_BUCKET)")
        if not self.skip_load:
            if not self.dataset or not self.table:
                raise ValueError("--dataset and --table are required unless --skip-load is set")
            if not self.storage.is_gcs:
                raise ValueError("Warehouse loads need a gs:// bucket; use --skip-load for local output")
        return self
