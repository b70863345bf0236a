"""HTTP client for the Uploads API, including the two-step CSV upload."""
import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from uploads_api.config.settings import DEFAULT_MAX_UPLOAD_BYTES
from uploads_api.services.upload_service import (
    CSV_CONTENT_TYPE,
    generate_unique_file_path,
    validate_csv_upload,
)

logger = logging.getLogger(__name__)


class FilesAPIClientError(Exception):
    """The API answered with an error envelope, or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MetadataStepError(FilesAPIClientError):
    """
    The bytes were stored but the file record could not be created.

    Everything needed to retry only the record step travels with the error;
    pass it to :meth:`FilesAPIClient.resume_metadata`.
    """

    def __init__(self, cause: FilesAPIClientError, name: str, size: int, bucket: str,
                 storage_path: str, uploaded_at: str):
        super().__init__(f"File stored at {bucket}/{storage_path} but not recorded: {cause.message}",
                         cause.status_code)
        self.name = name
        self.size = size
        self.bucket = bucket
        self.storage_path = storage_path
        self.uploaded_at = uploaded_at


class FilesAPIClient:
    """Client for a running Uploads API.

    Args:
        base_url: Root of the API, e.g. ``http://localhost:8000``
        session: Anything with the ``requests.Session`` call interface
        timeout: Request timeout in seconds
    """

    def __init__(self, base_url: str, session: Optional[Any] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise FilesAPIClientError(f"Cannot reach Uploads API: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise FilesAPIClientError(message or f"HTTP {response.status_code}", response.status_code)
        return body

    # Metadata

    def list_files(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/v1/files")["files"]

    def get_file(self, file_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/v1/files/{file_id}")["file"]

    def create_file(
        self,
        name: str,
        size: int,
        status: str = "uploading",
        storage_path: Optional[str] = None,
        uploaded_at: Optional[Union[str, datetime]] = None,
    ) -> Dict[str, Any]:
        payload = {"name": name, "size": size, "status": status, "storagePath": storage_path}
        if uploaded_at is not None:
            payload["uploadedAt"] = uploaded_at.isoformat() if isinstance(uploaded_at, datetime) else uploaded_at
        return self._request("POST", "/v1/files", json=payload)["file"]

    def update_status(self, file_id: str, status: str, version: Optional[int] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": status}
        if version is not None:
            payload["version"] = version
        return self._request("PATCH", f"/v1/files/{file_id}", json=payload)["file"]

    def delete_file(self, file_id: str, version: Optional[int] = None) -> None:
        params = {"version": version} if version is not None else None
        self._request("DELETE", f"/v1/files/{file_id}", params=params)

    # Bytes

    def upload(self, data: bytes, bucket: str, path: str, content_type: Optional[str] = None) -> Dict[str, Any]:
        filename = path.rsplit("/", 1)[-1]
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return self._request(
            "POST",
            "/v1/upload",
            files={"file": (filename, data, content_type)},
            data={"path": path, "bucket": bucket},
        )

    # Two-step upload

    def upload_csv(
        self,
        local_path: Union[str, Path],
        bucket: str,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> Dict[str, Any]:
        """
        Upload a local CSV and record it as ``uploaded``.

        The bytes go first, under a fresh unique path. If that fails, a
        ``failed`` record pointing at that path is written when the API
        allows it, so a retry can re-upload there, and the original error
        is raised. If the bytes land but the record does not, a
        :class:`MetadataStepError` is raised and the upload is not repeated.
        """
        local_path = Path(local_path)
        data = local_path.read_bytes()
        validate_csv_upload(local_path.name, len(data), max_bytes)

        storage_path = generate_unique_file_path(local_path.name)
        uploaded_at = datetime.now(timezone.utc).isoformat()

        try:
            self.upload(data, bucket, storage_path, content_type=CSV_CONTENT_TYPE)
        except FilesAPIClientError:
            self._record_failure(local_path.name, len(data), uploaded_at, storage_path)
            raise

        try:
            return self.create_file(
                local_path.name,
                len(data),
                status="uploaded",
                storage_path=storage_path,
                uploaded_at=uploaded_at,
            )
        except FilesAPIClientError as e:
            raise MetadataStepError(e, local_path.name, len(data), bucket, storage_path, uploaded_at) from e

    def resume_metadata(self, error: MetadataStepError) -> Dict[str, Any]:
        """Create the record a :class:`MetadataStepError` left missing."""
        logger.info(f"Recording {error.bucket}/{error.storage_path} after earlier failure")
        return self.create_file(
            error.name,
            error.size,
            status="uploaded",
            storage_path=error.storage_path,
            uploaded_at=error.uploaded_at,
        )

    def _record_failure(self, name: str, size: int, uploaded_at: str, storage_path: str) -> None:
        try:
            self.create_file(name, size, status="failed", storage_path=storage_path, uploaded_at=uploaded_at)
        except FilesAPIClientError as e:
            logger.warning(f"Could not record failed upload of {name}: {e.message}")
