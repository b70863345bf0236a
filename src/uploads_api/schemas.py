####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from database.schemas import FileStatus

__all__ = [
    "FileStatus",
    "FileRecordBase",
    "FileRecordCreate",
    "FileRecord",
    "StatusUpdate",
    "FileListResponse",
    "FileResponse",
    "AckResponse",
    "UploadResponse",
    "ErrorResponse",
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRecordBase(_CamelModel):
    """Descriptive fields shared by new and persisted records."""
    name: str = Field(min_length=1, max_length=255, description="Original filename.")
    size: int = Field(ge=0, description="Size of the file in bytes.")
    uploaded_at: datetime = Field(
        default_factory=utc_now,
        description="When the upload was attempted. ISO-8601 strings are accepted.",
    )
    status: FileStatus = Field(default=FileStatus.UPLOADING, description="Initial lifecycle status.")
    storage_path: Optional[str] = Field(
        default=None,
        max_length=1024,
        description="Object-store path of the bytes, once written.",
        json_schema_extra={"example": "uploads/1717171717171-k3j4h5g6/businesses.csv"},
    )

    @field_validator("uploaded_at")
    @classmethod
    def normalize_uploaded_at(cls, v: datetime) -> datetime:
        """Store every timestamp as an aware UTC datetime; naive input is taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("storage_path")
    @classmethod
    def blank_path_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class FileRecordCreate(FileRecordBase):
    """Payload for `POST /v1/files`: a file record without its id."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "businesses.csv",
                "size": 120,
                "uploadedAt": "2024-01-01T12:34:56Z",
                "status": "uploading",
                "storagePath": None,
            }
        },
    )

    @model_validator(mode="before")
    @classmethod
    def reject_client_assigned_id(cls, data):
        if isinstance(data, dict) and data.get("id") is not None:
            raise ValueError("id is assigned by the metadata store and must not be supplied")
        return data


class FileRecord(FileRecordBase):
    """A persisted file record."""
    id: str = Field(description="Identifier assigned by the metadata store.")
    version: int = Field(default=1, ge=1, description="Incremented by every status update.")
    updated_at: Optional[datetime] = Field(default=None, description="Time of the last status update.")

    @field_validator("updated_at")
    @classmethod
    def normalize_updated_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_document(self) -> dict:
        """Shape stored in the metadata collection."""
        document = self.model_dump(mode="json")
        # fixed-width timestamps keep string ordering equal to time ordering
        document["uploaded_at"] = self.uploaded_at.isoformat(timespec="microseconds")
        if self.updated_at is not None:
            document["updated_at"] = self.updated_at.isoformat(timespec="microseconds")
        return document


class StatusUpdate(_CamelModel):
    """Payload for `PATCH /v1/files/:id`."""
    status: FileStatus
    version: Optional[int] = Field(
        default=None,
        ge=1,
        description="Last-seen version. When given, the update fails with 409 if the record changed since.",
    )


class FileListResponse(BaseModel):
    """Response model for `GET /v1/files`."""
    success: bool = True
    files: List[FileRecord]


class FileResponse(BaseModel):
    """Response model for single-record endpoints."""
    success: bool = True
    file: FileRecord


class AckResponse(BaseModel):
    success: bool = True


class UploadResponse(BaseModel):
    """Response model for `POST /v1/upload`."""
    success: bool = True
    bucket: str
    path: str
    size: int = Field(description="Number of bytes written.")


class ErrorResponse(BaseModel):
    error: str
