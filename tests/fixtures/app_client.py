"""Application fixtures: settings, app and TestClient wired to moto and a temp database."""
import pytest
from fastapi.testclient import TestClient

from uploads_api.config.settings import Settings
from uploads_api.main import create_app
from tests.consts import TEST_BUCKET_NAME


def make_settings(db_path: str, **overrides) -> Settings:
    """Settings for tests. ``store_url`` is pinned to None so moto sees the requests."""
    values = dict(
        deployment_mode="local-dev",
        store_url=None,
        db_path=db_path,
        s3_bucket_name=TEST_BUCKET_NAME,
        log_level="DEBUG",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(db_path):
    return make_settings(db_path)


@pytest.fixture
def app(mocked_aws, settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
