"""Public interface for the fx_export package."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from importlib import metadata as importlib_metadata
from typing import TYPE_CHECKING, Iterable

from fx_export.config import ExportConfig, StorageLocation, StorageScheme, parse_bases
from fx_export.errors import (
    DivisionError,
    ExportError,
    FetchError,
    LoadError,
    ParseError,
    StorageError,
)
from fx_export.ingestion.models import ExchangeRate, RawSnapshot, derive_records
from fx_export.pipeline.scheduler import WorkUnit, plan_units

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from fx_export.ingestion.strategy import SnapshotProvider
    from fx_export.pipeline.exporter import ExportResult
    from fx_export.storage.base_backend import StorageBackend
    from fx_export.warehouse.bigquery_loader import BigQueryLoader

__all__ = [
    "__version__",
    "DivisionError",
    "ExchangeRate",
    "ExportConfig",
    "ExportError",
    "FetchError",
    "FxExport",
    "LoadError",
    "ParseError",
    "RawSnapshot",
    "StorageError",
    "StorageLocation",
    "StorageScheme",
    "WorkUnit",
    "derive_records",
    "export_rates",
]

try:
    __version__ = importlib_metadata.version("fx-export")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


def export_rates(*args, **kwargs):
    from fx_export.pipeline.exporter import export_rates as _export_rates

    return _export_rates(*args, **kwargs)


class FxExport:
    """Package facade bundling one configuration with its collaborators."""

    __slots__ = ("config", "provider", "storage", "loader")

    __version__ = __version__

    def __init__(
        self,
        config: ExportConfig | None = None,
        *,
        bucket: str | None = None,
        bases: Iterable[str] | str | None = None,
        end_date: date | None = None,
        delta: int | None = None,
        provider: "SnapshotProvider | None" = None,
        storage: "StorageBackend | None" = None,
        loader: "BigQueryLoader | None" = None,
        **options,
    ) -> None:
        """Build the facade from a ready ``ExportConfig`` or keyword options.

        Keyword options override the matching ``ExportConfig`` fields on a copy;
        ``bucket`` accepts the same forms as the ``--bucket`` flag.
        """

        overrides = dict(options)
        if bucket is not None:
            overrides["storage"] = StorageLocation.from_url(bucket)
        if bases is not None:
            overrides["bases"] = parse_bases(bases)
        if end_date is not None:
            overrides["end_date"] = end_date
        if delta is not None:
            overrides["delta"] = delta
        self.config = replace(config, **overrides) if config is not None else ExportConfig(**overrides)
        self.provider = provider
        self.storage = storage
        self.loader = loader

    def plan(self) -> list[WorkUnit]:
        """Return the work units a run would execute, in order."""

        return plan_units(self.config.window(), parse_bases(self.config.bases))

    def run(self) -> "ExportResult":
        """Export the configured window and trigger the warehouse load."""

        return export_rates(
            self.config,
            provider=self.provider,
            storage=self.storage,
            loader=self.loader,
        )
