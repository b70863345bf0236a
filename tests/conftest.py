pytest_plugins = [
    "tests.fixtures.mocked_aws",
    "tests.fixtures.db_client",
    "tests.fixtures.app_client",
]
