import pytest
from fastapi.testclient import TestClient

from classification import MockClassifier
from config import Settings
from database import Database
from main import create_app


@pytest.fixture
def db():
    return Database()


@pytest.fixture
def app(db):
    return create_app(settings=Settings(), db=db, classifier=MockClassifier(seed=7))


@pytest.fixture
def client(app):
    return TestClient(app)
