"""
Pytest configuration and fixtures for the MyAyu Tracker API tests.

Provides an in-memory stand-in for the async Supabase client so services and
endpoints can be exercised end to end without network calls.
"""
import os
import sys
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Set environment variables before importing main
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_KEY"] = "test-key"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["RATE_LIMIT_DEFAULT"] = "50/minute"
os.environ["RATE_LIMIT_DATA_ACCESS"] = "20/minute"
os.environ["RATE_LIMIT_WRITES"] = "20/minute"

# Import app after setting env vars
from main import app  # noqa: E402
from services.context import PatientContext  # noqa: E402

PATIENT_ID = "123e4567-e89b-12d3-a456-426614174000"
OTHER_PATIENT_ID = "87654321-4321-4321-4321-210987654321"

# Unique constraints enforced on insert: table -> columns
UNIQUE_KEYS = {
    "daily_entries": ("patient_id", "date"),
}

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = None


class FakeQueryBuilder:
    """
    Chainable query builder over a FakeSupabase table.

    Supports the subset of the PostgREST builder the services use:
    select/insert/update/upsert/delete followed by eq, gte, lte, in_, order
    and limit, then ``await execute()``.
    """

    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.on_conflict = "id"
        self.filters = []
        self.orders = []
        self.limit_count = None

    def select(self, columns="*", **kwargs):
        self.columns = columns
        return self

    def insert(self, payload, **kwargs):
        self.op = "insert"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict="id", **kwargs):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict or "id"
        return self

    def update(self, payload, **kwargs):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self, **kwargs):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self.filters.append(("lte", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, desc=False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count, **kwargs):
        self.limit_count = count
        return self

    def matches(self, row):
        for kind, column, value in self.filters:
            actual = row.get(column)
            if kind == "eq" and actual != value:
                return False
            if kind == "gte" and (actual is None or actual < value):
                return False
            if kind == "lte" and (actual is None or actual > value):
                return False
            if kind == "in" and actual not in value:
                return False
        return True

    async def execute(self):
        return FakeResponse(self.db.run(self))


class FakeSupabase:
    """
    In-memory async Supabase client.

    Attributes:
        tables: table name -> list of row dicts
        calls: (table, op) for every executed query, in execution order
        failures: table or (table, op) -> exception raised on execute
        before_insert: table -> callable run just before an insert lands,
            used to simulate a concurrent writer
    """

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.before_insert = {}
        self._clock = 0

    def table(self, name):
        return FakeQueryBuilder(self, name)

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def seed(self, table, *rows):
        """Insert rows directly, bypassing failures and hooks."""
        return [self._store(table, dict(row)) for row in rows]

    def tables_queried(self):
        return [table for table, _ in self.calls]

    def _timestamp(self):
        self._clock += 1
        return (_EPOCH + timedelta(seconds=self._clock)).isoformat()

    def _store(self, table, row):
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._timestamp())
        row.setdefault("updated_at", row["created_at"])
        self._check_unique(table, row)
        self.rows(table).append(row)
        return row

    def _check_unique(self, table, row):
        columns = UNIQUE_KEYS.get(table)
        if not columns:
            return
        key = tuple(row.get(c) for c in columns)
        for existing in self.rows(table):
            if tuple(existing.get(c) for c in columns) == key:
                raise APIError({
                    "message": f'duplicate key value violates unique constraint "{table}_unique"',
                    "code": "23505",
                    "hint": None,
                    "details": f"Key {columns}={key} already exists.",
                })

    def run(self, query):
        self.calls.append((query.table_name, query.op))
        failure = self.failures.get((query.table_name, query.op)) or self.failures.get(query.table_name)
        if failure is not None:
            raise failure

        if query.op == "insert":
            return self._insert(query)
        if query.op == "upsert":
            return self._upsert(query)
        if query.op == "update":
            return self._update(query)
        if query.op == "delete":
            return self._delete(query)
        return self._select(query)

    def _insert(self, query):
        payload = query.payload if isinstance(query.payload, list) else [query.payload]
        hook = self.before_insert.pop(query.table_name, None)
        if hook is not None:
            hook()
        return [dict(self._store(query.table_name, dict(row))) for row in payload]

    def _upsert(self, query):
        row = dict(query.payload)
        key = row.get(query.on_conflict)
        for existing in self.rows(query.table_name):
            if key is not None and existing.get(query.on_conflict) == key:
                existing.update(row)
                existing["updated_at"] = self._timestamp()
                return [dict(existing)]
        return [dict(self._store(query.table_name, row))]

    def _update(self, query):
        updated = []
        for row in self.rows(query.table_name):
            if query.matches(row):
                row.update(query.payload)
                row["updated_at"] = self._timestamp()
                updated.append(dict(row))
        return updated

    def _delete(self, query):
        kept, deleted = [], []
        for row in self.rows(query.table_name):
            (deleted if query.matches(row) else kept).append(row)
        self.tables[query.table_name] = kept
        return [dict(row) for row in deleted]

    def _select(self, query):
        rows = [row for row in self.rows(query.table_name) if query.matches(row)]
        for column, desc in reversed(query.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            # PostgREST puts nulls last ascending, first descending
            rows = missing + present if desc else present + missing
        if query.limit_count is not None:
            rows = rows[:query.limit_count]
        if query.columns.strip() == "*":
            return [dict(row) for row in rows]
        columns = [c.strip() for c in query.columns.split(",")]
        return [{c: row.get(c) for c in columns} for row in rows]


def api_error(message="boom", code="XX000"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def ctx():
    return PatientContext(patient_id=PATIENT_ID)


@pytest.fixture
def client(fake_db):
    """
    Test client with the Supabase dependency replaced by ``fake_db``.

    Rate limiter counters are cleared so each test starts with a clean slate.
    """
    from api.dependencies import get_supabase_client
    from api.rate_limiter import limiter

    # MemoryStorage has no public clear-all; reset() would drop the limits
    limiter._storage.storage.clear()

    app.dependency_overrides.clear()

    async def override_get_supabase_client():
        return fake_db

    app.dependency_overrides[get_supabase_client] = override_get_supabase_client

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
