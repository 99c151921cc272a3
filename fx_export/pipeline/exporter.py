"""CLI + helpers for exporting exchange-rate snapshots to GCS and BigQuery."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Sequence

from fx_export.config import (
    DEFAULT_BASES,
    DEFAULT_DELTA,
    ExportConfig,
    StorageLocation,
    parse_bases,
)
from fx_export.errors import ExportError
from fx_export.ingestion.openexchangerates import (
    OXR_API_URL,
    OpenExchangeRatesClient,
    fetch_and_serialize,
)
from fx_export.ingestion.strategy import SnapshotProvider
from fx_export.pipeline.scheduler import FanOutScheduler, WorkUnit, plan_units
from fx_export.storage import wildcard_path
from fx_export.storage.base_backend import StorageBackend
from fx_export.utils.credentials import load_credentials
from fx_export.utils.date_range import default_end_date, parse_date
from fx_export.utils.logger import get_logger, set_verbose
from fx_export.warehouse.bigquery_loader import BigQueryLoader, LoadResult

LOGGER = get_logger(__name__)

__all__ = [
    "ExportResult",
    "build_config",
    "build_parser",
    "build_storage",
    "export_rates",
    "main",
    "parse_args",
]


@dataclass(slots=True)
class ExportResult:
    """Summary of one export run."""

    planned: list[WorkUnit] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)
    load: LoadResult | None = None

    @property
    def total(self) -> int:
        return len(self.paths)


def build_parser() -> argparse.ArgumentParser:
    env = os.environ.get
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--from",
        dest="end_date",
        default=default_end_date().isoformat(),
        help="Most recent date to export (YYYY-MM-DD, default: yesterday)",
    )
    parser.add_argument(
        "--delta",
        type=int,
        default=DEFAULT_DELTA,
        help="Number of days to walk backward from --from",
    )
    parser.add_argument(
        "--bases",
        default=",".join(DEFAULT_BASES),
        help="Comma separated base currencies",
    )
    parser.add_argument("--app", dest="app_id", default=env("OXR_APP_ID"), help="Open Exchange Rates app id")
    parser.add_argument(
        "--bucket",
        default=env("FX_EXPORT_BUCKET"),
        help="GCS bucket name, gs://bucket or file:///directory",
    )
    parser.add_argument("--project", default=env("GOOGLE_CLOUD_PROJECT"), help="Google Cloud project")
    parser.add_argument("--dataset", default=env("FX_EXPORT_DATASET"), help="BigQuery dataset")
    parser.add_argument("--table", default=env("FX_EXPORT_TABLE"), help="BigQuery table")
    parser.add_argument(
        "--key",
        dest="key_path",
        default=env("GOOGLE_APPLICATION_CREDENTIALS"),
        help="Google service account key file",
    )
    parser.add_argument("--provider-url", default=OXR_API_URL, help="Rate provider API root")
    parser.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")
    parser.add_argument(
        "--gzip",
        dest="compress",
        action="store_true",
        help="Gzip each blob before upload",
    )
    parser.add_argument(
        "--write-disposition",
        choices=["WRITE_TRUNCATE", "WRITE_APPEND", "WRITE_EMPTY"],
        default="WRITE_TRUNCATE",
        help="BigQuery write disposition for the load job",
    )
    parser.add_argument("--skip-load", action="store_true", help="Write blobs without loading them")
    parser.add_argument("--dry-run", action="store_true", help="Only log the planned work")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> ExportConfig:
    """Turn parsed CLI arguments into a validated :class:`ExportConfig`."""

    config = ExportConfig(
        end_date=parse_date(args.end_date),
        delta=args.delta,
        bases=parse_bases(args.bases),
        app_id=args.app_id or None,
        storage=StorageLocation.from_url(args.bucket) if args.bucket else None,
        project=args.project or None,
        dataset=args.dataset or None,
        table=args.table or None,
        key_path=Path(args.key_path) if args.key_path else None,
        provider_url=args.provider_url,
        timeout=args.timeout,
        compress=args.compress,
        skip_load=args.skip_load,
        dry_run=args.dry_run,
        write_disposition=args.write_disposition,
    )
    return config.validate()


def build_storage(config: ExportConfig, credentials=None) -> StorageBackend:
    """Instantiate the backend matching ``config.storage``."""

    from fx_export.storage.gcs_backend import GCSBackend
    from fx_export.storage.local_backend import LocalBackend

    if config.storage is None:
        raise ValueError("A storage location is required")
    if config.storage.is_gcs:
        return GCSBackend(config.storage.location, project=config.project, credentials=credentials)
    return LocalBackend(config.storage.location)


def _log_plan(units: list[WorkUnit], wildcard: str | None) -> None:
    for unit in units:
        LOGGER.info("Planned %s", unit.destination)
    if wildcard:
        LOGGER.info("Planned load of %s", wildcard)


def export_rates(
    config: ExportConfig,
    *,
    provider: SnapshotProvider | None = None,
    storage: StorageBackend | None = None,
    loader: BigQueryLoader | None = None,
) -> ExportResult:
    """Export the configured window, then load every blob into the warehouse.

    Collaborators that are not supplied are built from ``config`` and closed
    before returning.
    """

    config.validate()
    window = config.window()
    units = plan_units(window, config.bases)
    result = ExportResult(planned=units)
    if config.dry_run:
        wildcard = config.storage.uri(wildcard_path()) if config.storage else None
        LOGGER.info("Dry-run enabled; skipping %s work unit(s)", len(units))
        _log_plan(units, None if config.skip_load else wildcard)
        return result

    owned: list[object] = []
    credentials = None
    try:
        if storage is None or (loader is None and not config.skip_load):
            credentials = load_credentials(config.key_path)
        if provider is None:
            provider = OpenExchangeRatesClient(
                config.app_id or "",
                base_url=config.provider_url,
                timeout=config.timeout,
            )
            owned.append(provider)
        if storage is None:
            storage = build_storage(config, credentials)
            owned.append(storage)
        if window:
            LOGGER.info(
                "Exporting %s day(s) from %s back to %s for %s",
                len(window),
                window[0],
                window[-1],
                ", ".join(config.bases),
            )
        scheduler = FanOutScheduler(
            partial(fetch_and_serialize, provider),
            storage,
            compress=config.compress,
        )
        result.paths = scheduler.run(window, config.bases)
        if config.skip_load:
            LOGGER.info("Skipping warehouse load; %s blob(s) written", result.total)
            return result
        if loader is None:
            loader = BigQueryLoader(
                project=config.project,
                credentials=credentials,
                write_disposition=config.write_disposition,
            )
            owned.append(loader)
        result.load = loader.load(storage.wildcard_uri(), config.dataset or "", config.table or "")
    finally:
        for collaborator in owned:
            collaborator.close()  # type: ignore[attr-defined]
    LOGGER.info("Export finished: %s blob(s) written and loaded", result.total)
    return result


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    try:
        config = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        export_rates(config)
    except ExportError:
        LOGGER.exception("Export aborted")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
