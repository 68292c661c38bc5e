import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from phonebook.config import Settings
from phonebook.database import ContactStore
from phonebook.main import create_app
from phonebook.metrics import Metrics


@pytest.fixture
def settings():
    return Settings(mongodb_uri="mongodb://localhost:27017/phonebook_test", log_level="WARNING")


@pytest.fixture
def store():
    client = AsyncMongoMockClient()
    return ContactStore(client["phonebook_test"]["contacts"])


@pytest.fixture
def metrics():
    return Metrics(default_collectors=False)


@pytest.fixture
def app(settings, store, metrics):
    return create_app(settings, store=store, metrics=metrics)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
