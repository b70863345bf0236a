"""
Upload orchestration: getting a file's bytes into the object store.

The orchestrator never writes metadata. Callers create or update the file
record afterwards, so the byte step and the metadata step can each be
retried on their own.
"""

import logging
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from uploads_api.adapters.storage import ObjectStoreAdapter
from uploads_api.errors import StoreError, UploadError, ValidationError

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "uploads"
CSV_CONTENT_TYPE = "text/csv"
_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class UploadResult:
    bucket: str
    path: str
    size: int


def generate_unique_file_path(filename: str) -> str:
    """Return ``uploads/<epoch millis>-<random>/<filename>``."""
    token = "".join(secrets.choice(_ALPHABET) for _ in range(13))
    basename = PurePosixPath(filename.replace("\\", "/")).name
    return f"{UPLOAD_PREFIX}/{int(time.time() * 1000)}-{token}/{basename}"


def validate_csv_upload(filename: Optional[str], size: int, max_bytes: int) -> None:
    """Reject anything that is not a non-empty CSV of at most ``max_bytes``."""
    if not filename or not filename.lower().endswith(".csv"):
        raise ValidationError("File must be a CSV")
    if size > max_bytes:
        raise ValidationError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")
    if size == 0:
        raise ValidationError("File is empty")


class UploadService:
    """Entry point for byte uploads. ``max_bytes`` caps a single object; None means no cap."""

    def __init__(self, object_store: ObjectStoreAdapter, max_bytes: Optional[int] = None):
        self.object_store = object_store
        self.max_bytes = max_bytes

    def check_size(self, size: Optional[int]) -> None:
        if self.max_bytes is not None and size is not None and size > self.max_bytes:
            raise ValidationError(f"File size exceeds upload limit of {self.max_bytes} bytes")

    def upload(
        self,
        data: Optional[bytes],
        bucket: Optional[str],
        path: Optional[str],
        content_type: Optional[str] = None,
    ) -> UploadResult:
        """
        Put ``data`` at ``bucket/path``.

        :raises ValidationError: a field is missing or the data is over the cap;
            no request was sent.
        :raises UploadError: the object store rejected the write.
        """
        if not data or not path or not bucket:
            raise ValidationError("Missing required fields")
        self.check_size(len(data))

        try:
            self.object_store.put(bucket, path, data, content_type=content_type)
        except StoreError as e:
            logger.error(f"Upload of {bucket}/{path} failed: {e.status_code} {e.detail}")
            raise UploadError(e) from e

        return UploadResult(bucket=bucket, path=path, size=len(data))
