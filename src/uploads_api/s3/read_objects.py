"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING

from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: "S3Client") -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: The boto3 S3 client.

    :return: True if the object exists, False otherwise.
    """
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise


def fetch_s3_object(bucket_name: str, object_key: str, s3_client: "S3Client") -> "GetObjectOutputTypeDef":
    """
    Fetch an object from an S3 bucket.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: The boto3 S3 client.

    :return: the ``get_object`` response; ``Body`` is a streaming body.
    """
    return s3_client.get_object(Bucket=bucket_name, Key=object_key)
