"""Metadata store fixtures for tests."""
from datetime import datetime, timezone

import pytest

from database.local import init_db
from uploads_api.db_layer.file_record_service import FileRecordService
from uploads_api.schemas import FileRecordCreate, FileStatus


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "test_uploads.db")
    init_db(path)
    return path


@pytest.fixture
def record_service(db_path):
    return FileRecordService(db_path)


def make_payload(name="a.csv", size=120, status=FileStatus.UPLOADING, storage_path=None, uploaded_at=None):
    """Build a create payload with sensible defaults."""
    return FileRecordCreate(
        name=name,
        size=size,
        status=status,
        storage_path=storage_path,
        uploaded_at=uploaded_at or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    )
