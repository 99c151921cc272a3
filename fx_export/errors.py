"""Exception hierarchy raised by the export pipeline."""

from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for every failure that aborts an export run."""


class FetchError(ExportError):
    """The rate provider could not be reached or returned an unusable body."""


class ParseError(ExportError):
    """A provider response does not match the expected snapshot shape."""


class DivisionError(ExportError, ZeroDivisionError):
    """A zero rate was returned, so its inverse is undefined."""

    def __init__(self, base: str, currency: str) -> None:
        super().__init__(f"Provider returned a zero {base}/{currency} rate; cannot invert it")
        self.base = base
        self.currency = currency


class StorageError(ExportError):
    """Writing a blob to object storage failed."""


class LoadError(ExportError):
    """The warehouse load job failed or reported errors."""


__all__ = [
    "ExportError",
    "FetchError",
    "ParseError",
    "DivisionError",
    "StorageError",
    "LoadError",
]
