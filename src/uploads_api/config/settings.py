# src/uploads_api/config/settings.py
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_MODES = ("local-dev", "aws-mock")
LOCAL_STORE_URL = "http://localhost:5000"
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class StoreConfig:
    """Explicit backend configuration handed to the object-store adapter."""

    store_url: Optional[str]
    credential: Optional[str]
    access_key_id: Optional[str] = None
    region: str = "us-east-1"


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from uploads_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # Object store
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    store_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL",
        description="Object store endpoint; None means the provider default"
    )

    access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    credential: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY",
        description="Secret used to sign object-store requests"
    )

    s3_bucket_name: str = Field(
        default="csv-files",
        alias="S3_BUCKET_NAME",
        description="Bucket that holds uploaded CSV files"
    )

    # Metadata store
    db_path: str = Field(
        default="uploads.db",
        alias="DB_PATH",
        description="SQLite file holding file metadata documents"
    )

    # Lifecycle
    enforce_transitions: bool = Field(
        default=True,
        description="Reject status changes outside the lifecycle table"
    )

    cascade_delete_objects: bool = Field(
        default=False,
        description="Delete object-store bytes when their record is deleted"
    )

    # Uploads
    max_upload_bytes: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        gt=0,
        description="Largest CSV accepted by the upload helpers"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by the CORS middleware"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local-mock": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    @model_validator(mode='after')
    def fill_local_mode_defaults(self):
        """Point local modes at the moto server unless a value was given explicitly."""
        if self.deployment_mode in LOCAL_MODES:
            if "store_url" not in self.model_fields_set and self.store_url is None:
                self.store_url = LOCAL_STORE_URL
            if "access_key_id" not in self.model_fields_set and self.access_key_id is None:
                self.access_key_id = "mock"
            if "credential" not in self.model_fields_set and self.credential is None:
                self.credential = "mock"
        return self

    def store_config(self) -> StoreConfig:
        """Build the explicit configuration object for the object-store adapter."""
        return StoreConfig(
            store_url=self.store_url,
            credential=self.credential,
            access_key_id=self.access_key_id,
            region=self.aws_region,
        )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
