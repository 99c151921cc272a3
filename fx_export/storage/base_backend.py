"""Backend strategy interfaces for blob storage."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fx_export.storage import wildcard_path


class StorageBackend(ABC):
    """Common interface implemented by every object storage backend.

    Implementations must accept concurrent ``put`` calls for distinct paths.
    """

    content_type = "application/json"

    @abstractmethod
    def put(self, path: str, payload: bytes) -> str:
        """Persist ``payload`` at ``path`` (overwriting) and return its URI."""

    @abstractmethod
    def uri(self, path: str) -> str:
        """Return the fully qualified URI for ``path``."""

    def wildcard_uri(self) -> str:
        """Return the URI pattern that covers every exported blob."""

        return self.uri(wildcard_path())

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["StorageBackend"]
