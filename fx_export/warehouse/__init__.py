"""Warehouse load helpers for :mod:`fx_export`."""

from __future__ import annotations

from fx_export.warehouse.bigquery_loader import RATES_SCHEMA, BigQueryLoader, LoadResult

__all__ = ["RATES_SCHEMA", "BigQueryLoader", "LoadResult"]
