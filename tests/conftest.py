from unittest.mock import patch

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import database
from main import app


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction):
        self.docs = sorted(self.docs, key=lambda d: d[key], reverse=direction < 0)
        return self

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    """In-memory stand-in for a pymongo collection."""

    def __init__(self):
        self.docs = []

    def find(self, query):
        assert query == {}
        return FakeCursor([dict(d) for d in self.docs])

    def insert_one(self, doc):
        doc = dict(doc)
        doc["_id"] = ObjectId()
        self.docs.append(doc)
        return FakeInsertResult(doc["_id"])


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def fake_db():
    db = FakeDatabase()
    with patch.object(database, "get_db", return_value=db):
        yield db


@pytest.fixture
def poems(fake_db):
    return fake_db["poems"]


@pytest.fixture
def client():
    return TestClient(app)
