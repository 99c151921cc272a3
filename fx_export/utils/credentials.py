"""Google credential helpers shared by the storage and warehouse clients."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from fx_export.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from google.auth.credentials import Credentials

LOGGER = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def load_credentials(key_path: str | Path | None) -> "Credentials | None":
    """Return service-account credentials for ``key_path``.

    ``None`` means the Google clients fall back to application-default
    credentials.
    """

    if not key_path:
        return None
    from google.oauth2 import service_account

    path = Path(key_path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Google key file not found: {path}")
    LOGGER.debug("Loading service account credentials from %s", path)
    return service_account.Credentials.from_service_account_file(str(path), scopes=SCOPES)


__all__ = ["SCOPES", "load_credentials"]
