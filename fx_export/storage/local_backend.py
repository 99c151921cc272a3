"""Filesystem backend strategy mirroring the bucket layout on disk."""

from __future__ import annotations

from pathlib import Path

from fx_export.errors import StorageError
from fx_export.storage.base_backend import StorageBackend
from fx_export.utils.logger import get_logger

LOGGER = get_logger(__name__)


class LocalBackend(StorageBackend):
    """Backend strategy that writes export blobs below a local directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def uri(self, path: str) -> str:
        return f"file://{(self.root / path).as_posix()}"

    def put(self, path: str, payload: bytes) -> str:
        target = self.root / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            raise StorageError(f"Failed to write {target}: {exc}") from exc
        LOGGER.info("%s", target)
        return self.uri(path)


__all__ = ["LocalBackend"]
