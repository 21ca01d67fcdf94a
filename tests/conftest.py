"""
Shared pytest fixtures.

The application is built with an in-memory mongomock client and a cheap
bcrypt cost so the suite runs without a MongoDB server.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from main import create_app
from schemas import UserCreate
from settings import Settings


TEST_SECRET = "test-secret"


@pytest.fixture
def settings():
    return Settings(
        database_name="movies_test",
        jwt_secret=TEST_SECRET,
        jwt_expires_in=3600,
        bcrypt_rounds=4,
        log_level="WARNING",
        _env_file=None,
    )


@pytest.fixture
def app(settings):
    return create_app(settings, mongo_client=mongomock.MongoClient())


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def directory(client):
    return client.app.state.users


@pytest.fixture
def favorites(client):
    return client.app.state.favorites


@pytest.fixture
def tokens(client):
    return client.app.state.tokens


@pytest.fixture
def credentials(directory):
    return directory.credentials


@pytest.fixture
def db(client):
    return client.app.state.db


@pytest.fixture
def alice(directory):
    return directory.register(UserCreate(username="alice1", password="Secret123!", email="a@b.com"))


@pytest.fixture
def auth_headers(tokens):
    def make(username="alice1"):
        return {"Authorization": f"Bearer {tokens.issue(username)}"}
    return make
