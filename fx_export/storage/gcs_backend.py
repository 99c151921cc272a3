"""Google Cloud Storage backend strategy."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from fx_export.errors import StorageError
from fx_export.storage.base_backend import StorageBackend
from fx_export.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from google.auth.credentials import Credentials

LOGGER = get_logger(__name__)


class GCSBackend(StorageBackend):
    """Backend strategy that uploads export blobs into a GCS bucket."""

    def __init__(
        self,
        bucket: str,
        *,
        project: str | None = None,
        credentials: "Credentials | None" = None,
        client: storage.Client | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("A GCS bucket name is required")
        self.bucket_name = bucket
        self.project = project
        self.credentials = credentials
        self.client = client
        self._bucket: storage.Bucket | None = None
        self._lock = threading.Lock()

    def _get_bucket(self) -> storage.Bucket:
        # worker threads of the first date race to build the shared client
        with self._lock:
            if self._bucket is None:
                if self.client is None:
                    self.client = storage.Client(project=self.project, credentials=self.credentials)
                self._bucket = self.client.bucket(self.bucket_name)
            return self._bucket

    def uri(self, path: str) -> str:
        return f"gs://{self.bucket_name}/{path}"

    def put(self, path: str, payload: bytes) -> str:
        target = self.uri(path)
        try:
            blob = self._get_bucket().blob(path)
            blob.upload_from_string(payload, content_type=self.content_type)
        except (GoogleAPIError, GoogleAuthError, OSError) as exc:
            raise StorageError(f"Failed to upload {target}: {exc}") from exc
        LOGGER.info("%s", target)
        return target

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


__all__ = ["GCSBackend"]
