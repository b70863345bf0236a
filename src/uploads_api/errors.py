"""
Error taxonomy for the Uploads API and the handlers that render it.

Every failure leaves the service as ``{"error": "<message>"}`` with a non-2xx
status code. Adapters raise these exceptions; routes let them propagate.
"""

import logging
import traceback
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class FilesAPIError(Exception):
    """Base class for errors surfaced to API callers."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_payload(self) -> dict:
        return {"error": self.message}


class ValidationError(FilesAPIError):
    """Missing or malformed input. The caller's fault, never retried."""

    http_status = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(ValidationError):
    """A status change the lifecycle does not allow."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Illegal status transition: {current} -> {target}")
        self.current = current
        self.target = target


class NotFoundError(FilesAPIError):
    """The operation targeted an id that does not exist."""

    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, file_id: str):
        super().__init__(f"File {file_id} not found")
        self.file_id = file_id


class ConflictError(FilesAPIError):
    """The caller's last-seen version no longer matches the stored record."""

    http_status = status.HTTP_409_CONFLICT

    def __init__(self, file_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Version conflict on file {file_id}: expected {expected_version}, found {actual_version}"
        )
        self.file_id = file_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class StoreError(FilesAPIError):
    """The object store rejected a request.

    ``status_code`` is the backend's HTTP status when one was returned.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message, detail)
        self.status_code = status_code


class UploadError(FilesAPIError):
    """A byte transfer failed. Wraps the underlying :class:`StoreError`."""

    def __init__(self, store_error: StoreError):
        suffix = f": {store_error.status_code}" if store_error.status_code else ""
        super().__init__(f"Upload failed{suffix}", store_error.detail)
        self.status_code = store_error.status_code
        self.store_error = store_error


class PersistenceError(FilesAPIError):
    """The metadata store failed to complete a write or read."""


async def handle_files_api_error(request: Request, exc: FilesAPIError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


async def handle_pydantic_validation_errors(
    request: Request, exc: PydanticValidationError | RequestValidationError
) -> JSONResponse:
    """Collapse pydantic's error list into the single-message envelope."""
    errors = exc.errors()
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates past the route handlers."""
    try:
        return await call_next(request)
    except Exception:  # pylint: disable=broad-except
        logger.error(f"Unhandled error on {request.method} {request.url.path}")
        traceback.print_exc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
