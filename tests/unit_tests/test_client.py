import pytest
from fastapi.testclient import TestClient

from tests.consts import TEST_BUCKET_NAME, TEST_CSV_CONTENT, TEST_CSV_NAME
from uploads_api.client import FilesAPIClient, FilesAPIClientError, MetadataStepError
from uploads_api.errors import ValidationError

BASE_URL = "http://testserver"


@pytest.fixture
def api(client: TestClient):
    return FilesAPIClient(BASE_URL, session=client)


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / TEST_CSV_NAME
    path.write_bytes(TEST_CSV_CONTENT)
    return path


def test_metadata_calls(api: FilesAPIClient):
    created = api.create_file("a.csv", 120)
    assert api.get_file(created["id"]) == created

    updated = api.update_status(created["id"], "uploaded", version=created["version"])
    assert updated["status"] == "uploaded"
    assert [f["id"] for f in api.list_files()] == [created["id"]]

    api.delete_file(created["id"])
    assert api.list_files() == []


def test_error_envelope_becomes_exception(api: FilesAPIClient):
    with pytest.raises(FilesAPIClientError) as exc_info:
        api.get_file("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "File missing not found"


def test_upload_csv_records_uploaded_file(api: FilesAPIClient, csv_file, mocked_aws):
    record = api.upload_csv(csv_file, TEST_BUCKET_NAME)

    assert record["status"] == "uploaded"
    assert record["name"] == TEST_CSV_NAME
    assert record["size"] == len(TEST_CSV_CONTENT)
    assert record["storagePath"].startswith("uploads/")
    body = mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key=record["storagePath"])["Body"].read()
    assert body == TEST_CSV_CONTENT


def test_upload_csv_failure_records_failed_file(api: FilesAPIClient, csv_file):
    with pytest.raises(FilesAPIClientError) as exc_info:
        api.upload_csv(csv_file, "no-such-bucket")

    assert exc_info.value.status_code == 500
    [failed] = api.list_files()
    assert (failed["name"], failed["status"]) == (TEST_CSV_NAME, "failed")
    assert failed["storagePath"].startswith("uploads/")
    assert failed["storagePath"].endswith(f"/{TEST_CSV_NAME}")


def test_upload_csv_rejects_non_csv_before_any_request(api: FilesAPIClient, tmp_path, monkeypatch):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello")
    monkeypatch.setattr(api, "_request", pytest.fail)

    with pytest.raises(ValidationError, match="File must be a CSV"):
        api.upload_csv(path, TEST_BUCKET_NAME)


def test_metadata_step_can_be_resumed(api: FilesAPIClient, csv_file, mocked_aws, monkeypatch):
    real_create = api.create_file
    attempts = []

    def flaky_create(*args, **kwargs):
        attempts.append(kwargs.get("status"))
        if len(attempts) == 1:
            raise FilesAPIClientError("Failed to save file metadata", 500)
        return real_create(*args, **kwargs)

    monkeypatch.setattr(api, "create_file", flaky_create)

    with pytest.raises(MetadataStepError) as exc_info:
        api.upload_csv(csv_file, TEST_BUCKET_NAME)

    error = exc_info.value
    assert api.list_files() == []
    assert mocked_aws.head_object(Bucket=TEST_BUCKET_NAME, Key=error.storage_path)

    record = api.resume_metadata(error)

    assert record["storagePath"] == error.storage_path
    assert record["status"] == "uploaded"
    assert attempts == ["uploaded", "uploaded"]
    assert len(api.list_files()) == 1
