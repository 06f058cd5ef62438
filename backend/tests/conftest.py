"""
Shared fixtures: a throwaway SQLite database and a TestClient bound to the app
"""

import os
import tempfile

import pytest

# Point settings at a temporary database before the app modules are imported
_TEST_DIR = tempfile.mkdtemp(prefix="yaobao-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_DIRECTORY"] = os.path.join(_TEST_DIR, "logs")
os.environ["AUTO_CREATE_TABLES"] = "true"

import sqlalchemy
from fastapi.testclient import TestClient

from main import app
from core.database import engine, metadata, create_tables
import db.models  # noqa: F401


def _truncate_all():
    with engine.begin() as conn:
        for table in reversed(metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client():
    create_tables()
    _truncate_all()
    with TestClient(app) as test_client:
        yield test_client
    _truncate_all()


@pytest.fixture
def count_rows():
    """Count rows of a table, optionally filtered by a where clause."""
    def _count(table, where=None):
        query = sqlalchemy.select(sqlalchemy.func.count()).select_from(table)
        if where is not None:
            query = query.where(where)
        with engine.connect() as conn:
            return conn.execute(query).scalar()
    return _count


@pytest.fixture
def create_elderly(client):
    """Save a profile through the API and return the response body."""
    def _create(name="王阿姨", plans=None, **extra):
        body = {"name": name, "plans": plans or []}
        body.update(extra)
        response = client.post("/api/v1/elderly", json=body)
        assert response.status_code == 200, response.text
        return response.json()
    return _create
