import pytest
from fastapi.testclient import TestClient

from sagittarius.server.main import create_app
from sagittarius.server.settings import Settings
from sagittarius.server.store import StatsStore

SECRET = "test-secret"


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "stats.db")


@pytest.fixture
def store(db_path):
    store = StatsStore(db_path)
    store.init_schema()
    return store


@pytest.fixture
def settings(db_path):
    return Settings({"DATABASE_URL": f"sqlite://{db_path}", "API_SECRET": SECRET})


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def auth():
    return {"X-API-Secret": SECRET}
