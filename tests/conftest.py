import mongomock
import pytest
from fastapi.testclient import TestClient

from database import USERS, create_document
from main import create_app
from schemas import User

CHAIR = {
    "id": 1,
    "title": "Chair",
    "price": 20,
    "location": "NY",
    "categorie": "furniture",
    "image": "x.png",
    "description": "d",
}


@pytest.fixture
def db():
    return mongomock.MongoClient()["listings_test"]


@pytest.fixture
def app(db):
    return create_app(database=db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seller(db):
    return create_document(db, USERS, User(email="sam@shop.com", password="s3cret", role="seller"))


@pytest.fixture
def admin(db):
    return create_document(
        db, USERS, User(email="ada@shop.com", password="r00t", role="admin", adminKey="k-123")
    )
