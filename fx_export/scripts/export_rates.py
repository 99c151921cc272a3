"""CLI entry point for exporting exchange rates."""

from __future__ import annotations

from fx_export.pipeline.exporter import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    raise SystemExit(main())
