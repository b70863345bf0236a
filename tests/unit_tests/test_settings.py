import pytest
from pydantic import ValidationError

from uploads_api.config.settings import LOCAL_STORE_URL, Settings, StoreConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "AWS_ENDPOINT_URL",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "DEPLOYMENT_MODE",
        "ENFORCE_TRANSITIONS",
        "S3_BUCKET_NAME",
    ):
        monkeypatch.delenv(name, raising=False)


def test_local_mode_points_at_moto_server():
    settings = Settings(_env_file=None)

    assert settings.deployment_mode == "local-dev"
    assert settings.store_url == LOCAL_STORE_URL
    assert settings.credential == "mock"


def test_explicit_store_url_wins_in_local_mode():
    settings = Settings(_env_file=None, store_url=None)
    assert settings.store_url is None


def test_prod_mode_uses_provider_defaults():
    settings = Settings(_env_file=None, deployment_mode="aws-prod")

    assert settings.store_url is None
    assert settings.credential is None


def test_legacy_mode_names_are_mapped():
    assert Settings(_env_file=None, deployment_mode="cloud").deployment_mode == "aws-prod"


def test_unknown_mode_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, deployment_mode="staging")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AWS_ENDPOINT_URL", "http://minio:9000")
    monkeypatch.setenv("S3_BUCKET_NAME", "directory-csvs")
    monkeypatch.setenv("ENFORCE_TRANSITIONS", "false")

    settings = Settings(_env_file=None)

    assert settings.store_url == "http://minio:9000"
    assert settings.s3_bucket_name == "directory-csvs"
    assert settings.enforce_transitions is False


def test_store_config():
    settings = Settings(
        _env_file=None,
        deployment_mode="aws-prod",
        store_url="https://s3.eu-west-1.amazonaws.com",
        credential="secret",
        access_key_id="AKIA",
        aws_region="eu-west-1",
    )

    assert settings.store_config() == StoreConfig(
        store_url="https://s3.eu-west-1.amazonaws.com",
        credential="secret",
        access_key_id="AKIA",
        region="eu-west-1",
    )


def test_log_level_is_uppercased():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"


def test_default_bucket_name_is_valid_for_s3(mocked_aws):
    settings = Settings(_env_file=None)

    assert settings.s3_bucket_name == "csv-files"
    mocked_aws.create_bucket(Bucket=settings.s3_bucket_name)
    assert settings.s3_bucket_name in [b["Name"] for b in mocked_aws.list_buckets()["Buckets"]]


def test_dotenv_file_is_read(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("S3_BUCKET_NAME=from-dotenv\nENFORCE_TRANSITIONS=false\n")
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.s3_bucket_name == "from-dotenv"
    assert settings.enforce_transitions is False
    assert not hasattr(settings, "app_name")
