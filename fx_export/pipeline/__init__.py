"""Export pipeline entry points for :mod:`fx_export`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["export_rates", "ExportResult", "FanOutScheduler", "WorkUnit"]

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from fx_export.pipeline.exporter import ExportResult as ExportResult
    from fx_export.pipeline.exporter import export_rates as export_rates
    from fx_export.pipeline.scheduler import FanOutScheduler as FanOutScheduler
    from fx_export.pipeline.scheduler import WorkUnit as WorkUnit


def __getattr__(name: str) -> Any:
    """Lazily expose pipeline helpers so the Google clients load on demand."""

    if name == "export_rates":
        from fx_export.pipeline.exporter import export_rates as _export_rates

        return _export_rates
    if name == "ExportResult":
        from fx_export.pipeline.exporter import ExportResult as _ExportResult

        return _ExportResult
    if name in {"FanOutScheduler", "WorkUnit"}:
        from fx_export.pipeline.scheduler import FanOutScheduler as _FanOutScheduler
        from fx_export.pipeline.scheduler import WorkUnit as _WorkUnit

        return {"FanOutScheduler": _FanOutScheduler, "WorkUnit": _WorkUnit}[name]
    raise AttributeError(f"module 'fx_export.pipeline' has no attribute {name}")
