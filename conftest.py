import pytest
from fastapi.testclient import TestClient

from api import create_app
from config import Settings
from library import Library


@pytest.fixture
def data_file(tmp_path):
    # Unique store file per test
    return str(tmp_path / "db.json")


@pytest.fixture
def lib(data_file):
    return Library(data_file)


@pytest.fixture
def app_settings(data_file):
    return Settings(data_file=data_file, strict_not_found=False)


@pytest.fixture
def client(app_settings):
    # Entering the client runs the lifespan, which loads the store
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
