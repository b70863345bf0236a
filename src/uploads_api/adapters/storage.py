"""
Object store adapter.

Puts, reads and deletes bytes at ``(bucket, path)`` through boto3. Inputs are
checked before any request is built, and backend failures come back as
:class:`StoreError` with the backend status preserved. Nothing is retried here.
"""

import logging
from typing import TYPE_CHECKING, Optional

from botocore.exceptions import BotoCoreError, ClientError

from uploads_api.errors import StoreError, ValidationError
from uploads_api.s3.delete_objects import delete_s3_object
from uploads_api.s3.read_objects import fetch_s3_object, object_exists_in_s3
from uploads_api.s3.write_objects import upload_s3_object
from uploads_api.utils.decorators import log_execution_time

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def _translate(err: Exception, action: str, bucket: str, path: str) -> StoreError:
    if isinstance(err, ClientError):
        status_code = err.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        error = err.response.get("Error", {})
        detail = f"{error.get('Code', 'Unknown')}: {error.get('Message', str(err))}"
    else:
        status_code = None
        detail = str(err)
    logger.error(f"Object store {action} failed for {bucket}/{path}: {status_code} {detail}")
    return StoreError(f"Object store {action} failed", status_code=status_code, detail=detail)


def _require(bucket: str, path: str) -> None:
    missing = [name for name, value in (("bucket", bucket), ("path", path)) if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class ObjectStoreAdapter:
    """Adapter over a single boto3 S3 client. Holds no other state."""

    def __init__(self, s3_client: "S3Client"):
        self.s3_client = s3_client

    @log_execution_time
    def put(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        """Write ``data`` to ``bucket/path``. Raises ValidationError or StoreError."""
        missing = [
            name for name, value in (("file", data), ("bucket", bucket), ("path", path)) if not value
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        try:
            upload_s3_object(
                bucket_name=bucket,
                object_key=path,
                file_content=data,
                s3_client=self.s3_client,
                content_type=content_type,
            )
        except (ClientError, BotoCoreError) as err:
            raise _translate(err, "put", bucket, path) from err
        logger.info(f"Stored {len(data)} bytes at {bucket}/{path}")

    def get(self, bucket: str, path: str) -> bytes:
        _require(bucket, path)
        try:
            response = fetch_s3_object(bucket, path, s3_client=self.s3_client)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as err:
            raise _translate(err, "get", bucket, path) from err

    def exists(self, bucket: str, path: str) -> bool:
        _require(bucket, path)
        try:
            return object_exists_in_s3(bucket, path, s3_client=self.s3_client)
        except (ClientError, BotoCoreError) as err:
            raise _translate(err, "head", bucket, path) from err

    @log_execution_time
    def delete(self, bucket: str, path: str) -> None:
        _require(bucket, path)
        try:
            delete_s3_object(bucket, path, s3_client=self.s3_client)
        except (ClientError, BotoCoreError) as err:
            raise _translate(err, "delete", bucket, path) from err
        logger.info(f"Deleted {bucket}/{path}")

    def check_bucket(self, bucket: str) -> None:
        """Confirm the bucket is reachable. Used by the health endpoint."""
        try:
            self.s3_client.head_bucket(Bucket=bucket)
        except (ClientError, BotoCoreError) as err:
            raise _translate(err, "head_bucket", bucket, "") from err
