from datetime import datetime, timedelta, timezone

import pytest

from tests.fixtures.db_client import make_payload
from uploads_api.db_layer.file_record_service import FileRecordService
from uploads_api.errors import ConflictError, NotFoundError, PersistenceError
from uploads_api.schemas import FileRecordCreate, FileStatus


def test_create_assigns_unique_ids(record_service):
    first = record_service.create_file(make_payload())
    second = record_service.create_file(make_payload())

    assert first.id and second.id
    assert first.id != second.id
    assert first.version == 1
    assert {r.id for r in record_service.list_files()} == {first.id, second.id}


def test_get_file_round_trips_fields(record_service):
    created = record_service.create_file(
        make_payload(name="b.csv", size=42, status=FileStatus.UPLOADED, storage_path="uploads/1-x/b.csv")
    )
    fetched = record_service.get_file(created.id)

    assert fetched.model_dump() == created.model_dump()
    assert fetched.storage_path == "uploads/1-x/b.csv"


def test_get_missing_file(record_service):
    with pytest.raises(NotFoundError):
        record_service.get_file("does-not-exist")


def test_list_is_newest_first(record_service):
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    for offset, name in [(0, "first.csv"), (2, "third.csv"), (1, "second.csv")]:
        record_service.create_file(make_payload(name=name, uploaded_at=base + timedelta(hours=offset)))

    assert [r.name for r in record_service.list_files()] == ["third.csv", "second.csv", "first.csv"]


def test_string_and_datetime_timestamps_are_equivalent(record_service):
    from_string = record_service.create_file(
        FileRecordCreate.model_validate(
            {"name": "a.csv", "size": 1, "uploadedAt": "2024-01-01T14:34:56+02:00"}
        )
    )
    from_datetime = record_service.create_file(
        make_payload(uploaded_at=datetime(2024, 1, 1, 12, 34, 56, tzinfo=timezone.utc))
    )

    stored_string = record_service.get_file(from_string.id).uploaded_at
    stored_datetime = record_service.get_file(from_datetime.id).uploaded_at
    assert stored_string == stored_datetime
    assert stored_string.tzinfo is not None
    assert stored_string.utcoffset() == timedelta(0)


def test_naive_timestamp_is_taken_as_utc(record_service):
    record = record_service.create_file(make_payload(uploaded_at=datetime(2024, 1, 1, 12, 0)))
    assert record_service.get_file(record.id).uploaded_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_update_status_is_idempotent(record_service):
    record = record_service.create_file(make_payload())

    once = record_service.update_status(record.id, FileStatus.UPLOADED)
    twice = record_service.update_status(record.id, FileStatus.UPLOADED)

    assert once.status == twice.status == FileStatus.UPLOADED
    assert [r.status for r in record_service.list_files()] == [FileStatus.UPLOADED]
    assert twice.updated_at is not None


def test_update_missing_id_leaves_store_unchanged(record_service):
    record = record_service.create_file(make_payload())
    before = record_service.list_files()

    with pytest.raises(NotFoundError):
        record_service.update_status("missing", FileStatus.FAILED)
    with pytest.raises(NotFoundError):
        record_service.delete_file("missing")

    assert record_service.list_files() == before
    assert record_service.get_file(record.id).status == FileStatus.UPLOADING


def test_update_with_stale_version_conflicts(record_service):
    record = record_service.create_file(make_payload())
    updated = record_service.update_status(record.id, FileStatus.UPLOADED, expected_version=1)
    assert updated.version == 2

    with pytest.raises(ConflictError) as exc_info:
        record_service.update_status(record.id, FileStatus.FAILED, expected_version=1)

    assert exc_info.value.actual_version == 2
    assert record_service.get_file(record.id).status == FileStatus.UPLOADED


def test_delete_removes_from_list(record_service):
    keep = record_service.create_file(make_payload(name="keep.csv"))
    drop = record_service.create_file(make_payload(name="drop.csv"))

    removed = record_service.delete_file(drop.id)

    assert removed.id == drop.id
    assert [r.id for r in record_service.list_files()] == [keep.id]


def test_delete_with_stale_version_conflicts(record_service):
    record = record_service.create_file(make_payload())
    record_service.update_status(record.id, FileStatus.FAILED)

    with pytest.raises(ConflictError):
        record_service.delete_file(record.id, expected_version=1)
    assert record_service.count_files() == 1


def test_uninitialised_store_raises_persistence_error(tmp_path):
    service = FileRecordService(str(tmp_path / "empty.db"))

    with pytest.raises(PersistenceError, match="Failed to fetch files"):
        service.list_files()
    with pytest.raises(PersistenceError, match="Failed to save file metadata"):
        service.create_file(make_payload())
