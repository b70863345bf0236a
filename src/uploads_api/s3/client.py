"""Construct the boto3 S3 client from an explicit store configuration."""

from typing import TYPE_CHECKING

import boto3
from botocore.config import Config

from uploads_api.config.settings import StoreConfig

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def build_s3_client(config: StoreConfig) -> "S3Client":
    """
    Create an S3 client for the configured store.

    :param config: endpoint and credential of the object store. A ``None``
        endpoint uses the provider default; ``None`` credentials fall back to
        boto3's own credential chain.
    """
    return boto3.client(
        "s3",
        endpoint_url=config.store_url,
        region_name=config.region,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.credential,
        config=Config(signature_version="s3v4", retries={"max_attempts": 1, "mode": "standard"}),
    )
