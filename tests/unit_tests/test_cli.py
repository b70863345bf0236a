import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from tests.consts import TEST_BUCKET_NAME, TEST_CSV_CONTENT
from uploads_api import cli as cli_module
from uploads_api.client import FilesAPIClient
from uploads_api.config.settings import get_settings


@pytest.fixture
def runner(client: TestClient, monkeypatch, db_path):
    monkeypatch.setenv("DB_PATH", db_path)
    monkeypatch.setenv("S3_BUCKET_NAME", TEST_BUCKET_NAME)
    monkeypatch.setattr(cli_module, "FilesAPIClient", lambda api_url: FilesAPIClient(api_url, session=client))
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


def test_show_config(runner):
    result = runner.invoke(cli_module.cli, ["show-config"])

    assert result.exit_code == 0
    assert f"S3 Bucket: {TEST_BUCKET_NAME}" in result.output


def test_init_db(runner, tmp_path):
    target = tmp_path / "fresh.db"
    result = runner.invoke(cli_module.cli, ["init-db", "--db-path", str(target)])

    assert result.exit_code == 0
    assert target.exists()


def test_upload_list_set_status_delete(runner, tmp_path):
    csv_path = tmp_path / "businesses.csv"
    csv_path.write_bytes(TEST_CSV_CONTENT)
    api_url = ["--api-url", "http://testserver"]

    result = runner.invoke(cli_module.cli, ["upload", str(csv_path), *api_url])
    assert result.exit_code == 0, result.output
    file_id = result.output.split(" as ")[1].split()[0]

    result = runner.invoke(cli_module.cli, ["list", *api_url])
    assert "Found 1 files" in result.output
    assert file_id in result.output

    result = runner.invoke(cli_module.cli, ["set-status", file_id, "added", *api_url])
    assert result.exit_code == 0
    assert "is now added" in result.output

    result = runner.invoke(cli_module.cli, ["delete", file_id, *api_url])
    assert result.exit_code == 0

    result = runner.invoke(cli_module.cli, ["list", *api_url])
    assert "No files found" in result.output


def test_errors_exit_non_zero(runner):
    result = runner.invoke(cli_module.cli, ["delete", "missing", "--api-url", "http://testserver"])

    assert result.exit_code == 1
    assert "File missing not found" in result.output
