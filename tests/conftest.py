from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure the project root is on sys.path so `import healthlog.*` works in tests.
ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

# Settings are read at import time; keep the tests off any real database.
for var in ("DATABASE_URL", "DB_HOST", "DB_DATABASE"):
    os.environ.pop(var, None)
os.environ["JWT_SECRET"] = "unit-test-secret"
os.environ["FRONTEND_URL"] = "https://app.example.test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402


class FakeResult:
    """Minimal stand-in for a SQLAlchemy CursorResult"""

    def __init__(self, rows=None, rowcount=None, lastrowid=None):
        self.rows = [dict(r) for r in rows or []]
        self.rowcount = len(self.rows) if rowcount is None else rowcount
        self.lastrowid = lastrowid

    def mappings(self):
        return _FakeMappings(self.rows)

    def first(self):
        return tuple(self.rows[0].values()) if self.rows else None

    def all(self):
        return [tuple(r.values()) for r in self.rows]

    def scalar(self):
        row = self.first()
        return row[0] if row else None


class _FakeMappings:
    def __init__(self, rows):
        self.rows = rows

    def all(self):
        return list(self.rows)

    def first(self):
        return self.rows[0] if self.rows else None


class _FakeTransaction:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.session.commits += 1
        else:
            self.session.rollbacks += 1
        return False


class FakeSession:
    """
    In-memory AsyncSession replacement.

    Register canned results with on(fragment, ...). The first registered
    result whose fragment occurs in the executed SQL is returned and consumed;
    unmatched statements get an empty result with rowcount 0.
    """

    def __init__(self):
        self.responses = []
        self.executed = []
        self.commits = 0
        self.rollbacks = 0

    def on(self, fragment, rows=None, rowcount=None, lastrowid=None, error=None):
        self.responses.append((fragment, error or FakeResult(rows, rowcount, lastrowid)))
        return self

    async def execute(self, statement):
        sql = " ".join(str(statement).split())
        params = dict(statement.compile().params)
        self.executed.append((sql, params))

        for index, (fragment, response) in enumerate(self.responses):
            if fragment in sql:
                del self.responses[index]
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResult()

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    def begin(self):
        return _FakeTransaction(self)

    def find(self, fragment):
        """Every (sql, params) executed whose SQL contains the fragment"""
        return [(sql, params) for sql, params in self.executed if fragment in sql]


@pytest.fixture
def db():
    return FakeSession()


@pytest.fixture
def client(db):
    from healthlog.database.connection import get_db_session
    from healthlog.main import app

    async def _override():
        yield db

    app.dependency_overrides[get_db_session] = _override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return 7


@pytest.fixture
def auth_headers(user_id):
    from healthlog.services.auth import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
