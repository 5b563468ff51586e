import pytest
from fastapi.testclient import TestClient

from backend.core.config import Settings
from main import create_app

TEST_PORT = 4321


@pytest.fixture
def settings():
    return Settings(port=TEST_PORT)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def post_json(client):
    def _post(body: str):
        return client.post("/data", content=body, headers={"Content-Type": "application/json"})
    return _post
