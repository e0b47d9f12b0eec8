"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are read at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import json
import pytest
from contextlib import ExitStack
from types import SimpleNamespace
from unittest.mock import patch
from datetime import datetime, timezone
from itertools import count
from typing import Any, Callable, Generator, Optional

# ===================
# MOCK SUPABASE CLIENT
# ===================

_id_counter = count(1)


class MockAPIError(Exception):
    """Stands in for postgrest.APIError."""

    def __init__(self, message: str, code: str = "PGRST116"):
        super().__init__(message)
        self.message = message
        self.code = code


class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: Any = None, count: int = None):
        self.data = data
        if count is not None:
            self.count = count
        elif isinstance(data, list):
            self.count = len(data)
        else:
            self.count = 1 if data else 0


class MockSupabaseQuery:
    """
    Chainable query builder over an in-memory table.

    Filters, ordering and limits are applied for real, and writes change
    the table rows, so a test can assert on the final state.
    """

    def __init__(self, client: "MockSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[Callable[[dict], bool]] = []
        self._eq: dict = {}
        self._negate = False
        self._is_single = False
        self._is_maybe_single = False
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None
        self._range: Optional[tuple[int, int]] = None

    # Operations

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._op = "update"
        self._payload = data
        return self

    def delete(self):
        self._op = "delete"
        return self

    # Filters

    def _add_filter(self, predicate: Callable[[dict], bool]):
        if self._negate:
            self._filters.append(lambda row: not predicate(row))
            self._negate = False
        else:
            self._filters.append(predicate)
        return self

    def eq(self, column, value):
        self._eq[column] = value
        return self._add_filter(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._add_filter(lambda row: row.get(column) != value)

    def is_(self, column, value):
        if value in ("null", None):
            return self._add_filter(lambda row: row.get(column) is None)
        return self._add_filter(lambda row: row.get(column) == value)

    @property
    def not_(self):
        self._negate = True
        return self

    # Modifiers

    def single(self):
        self._is_single = True
        return self

    def maybe_single(self):
        self._is_maybe_single = True
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self._filters)

    def execute(self) -> MockSupabaseResponse:
        self._client._raise_if_failing(self._table, self._op, self._eq)
        rows = self._client._rows(self._table)

        if self._op == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for item in items:
                row = dict(item)
                row.setdefault("id", f"test-uuid-{next(_id_counter)}")
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                rows.append(row)
                inserted.append(dict(row))
            self._client._record(self._table, "insert", self._payload, self._eq)
            return MockSupabaseResponse(data=inserted)

        matched = [row for row in rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(self._payload)
            self._client._record(self._table, "update", self._payload, self._eq)
            return MockSupabaseResponse(data=[dict(r) for r in matched])

        if self._op == "delete":
            for row in matched:
                rows.remove(row)
            self._client._record(self._table, "delete", None, self._eq)
            return MockSupabaseResponse(data=[dict(r) for r in matched])

        result = [dict(r) for r in matched]
        if self._order:
            column, desc = self._order
            result.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        if self._range:
            start, end = self._range
            result = result[start:end + 1]
        if self._limit is not None:
            result = result[:self._limit]

        # postgrest raises for single() on zero rows; maybe_single() returns None
        if self._is_single:
            if not result:
                raise MockAPIError("JSON object requested, multiple (or no) rows returned")
            return MockSupabaseResponse(data=result[0])
        if self._is_maybe_single:
            return MockSupabaseResponse(data=result[0]) if result else None
        return MockSupabaseResponse(data=result)


class MockRPC:
    def __init__(self, client: "MockSupabaseClient", name: str, params: Optional[dict]):
        self._client = client
        self._name = name
        self._params = params

    def execute(self) -> MockSupabaseResponse:
        self._client.rpc_calls.append((self._name, self._params))
        error = self._client._rpc_errors.get(self._name)
        if error is not None:
            raise error
        return MockSupabaseResponse(data=self._client._rpc_results.get(self._name))


class MockFunctions:
    """Edge functions double. Replies are returned as JSON bytes, like the real client."""

    def __init__(self):
        self.invocations: list[tuple[str, Any]] = []
        self._responses: dict[str, Any] = {}
        self._errors: dict[str, Exception] = {}

    def set_response(self, name: str, payload: Any):
        self._responses[name] = payload

    def set_error(self, name: str, error: Exception):
        self._errors[name] = error

    def invoke(self, function_name: str, invoke_options: Optional[dict] = None):
        body = (invoke_options or {}).get("body")
        self.invocations.append((function_name, body))
        if function_name in self._errors:
            raise self._errors[function_name]
        return json.dumps(self._responses.get(function_name, {"success": True})).encode("utf-8")


class MockBucket:
    def __init__(self, storage: "MockStorage", bucket: str):
        self._storage = storage
        self._bucket = bucket

    def upload(self, path: str, file: bytes, file_options: Optional[dict] = None):
        if self._storage.upload_error is not None:
            raise self._storage.upload_error
        self._storage.uploads.append((self._bucket, path, len(file), file_options))
        return SimpleNamespace(path=path)

    def get_public_url(self, path: str) -> str:
        return f"https://test-project.supabase.co/storage/v1/object/public/{self._bucket}/{path}"


class MockStorage:
    def __init__(self):
        self.uploads: list[tuple] = []
        self.upload_error: Optional[Exception] = None

    def from_(self, bucket: str) -> MockBucket:
        return MockBucket(self, bucket)


class MockAuth:
    """Maps access tokens to user ids. No token means the client's own session."""

    def __init__(self):
        self._tokens: dict[str, str] = {}
        self.session_user_id: Optional[str] = None

    def set_user(self, user_id: str, token: str = "test-token"):
        self._tokens[token] = user_id

    def get_user(self, jwt: Optional[str] = None):
        user_id = self._tokens.get(jwt) if jwt else self.session_user_id
        if user_id is None:
            return None
        return SimpleNamespace(user=SimpleNamespace(id=user_id))


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self._failures: list[tuple[str, Optional[str], dict, Exception]] = []
        self._rpc_results: dict[str, Any] = {}
        self._rpc_errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, str, Any, dict]] = []
        self.rpc_calls: list[tuple[str, Any]] = []
        self.functions = MockFunctions()
        self.storage = MockStorage()
        self.auth = MockAuth()

    def set_table_data(self, table_name: str, data: list):
        """Configure rows for a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def get_table_data(self, table_name: str) -> list[dict]:
        return self._tables.get(table_name, [])

    def fail_on(
        self,
        table_name: str,
        op: Optional[str] = None,
        match: Optional[dict] = None,
        error: Optional[Exception] = None
    ):
        """Make matching queries raise. `match` is compared to the eq() filters."""
        self._failures.append((table_name, op, match or {}, error or Exception("network down")))

    def set_rpc_result(self, name: str, data: Any):
        self._rpc_results[name] = data

    def set_rpc_error(self, name: str, error: Exception):
        self._rpc_errors[name] = error

    def writes(self, table_name: str, op: str) -> list:
        """Payloads written to a table with the given operation."""
        return [payload for table, kind, payload, _ in self.calls if table == table_name and kind == op]

    def table(self, name: str) -> MockSupabaseQuery:
        return MockSupabaseQuery(self, name)

    def rpc(self, name: str, params: Optional[dict] = None) -> MockRPC:
        return MockRPC(self, name, params)

    def _rows(self, table_name: str) -> list[dict]:
        return self._tables.setdefault(table_name, [])

    def _record(self, table_name: str, op: str, payload: Any, eq: dict):
        self.calls.append((table_name, op, payload, dict(eq)))

    def _raise_if_failing(self, table_name: str, op: str, eq: dict):
        for table, fail_op, match, error in self._failures:
            if table != table_name or (fail_op and fail_op != op):
                continue
            if all(eq.get(k) == v for k, v in match.items()):
                raise error


# ===================
# FIXTURES
# ===================

# Modules that import get_supabase_client at load time
CLIENT_MODULES = (
    "config.database",
    "services.auth_service",
    "services.tasting_sync_service",
    "services.wine_queue_service",
    "services.edge_function_service",
    "services.scan_service",
    "services.tasting_service",
    "services.stats_service",
    "services.sharing_service",
)

# Cached service singletons
SINGLETONS = (
    ("services.tasting_sync_service", "_tasting_sync_service"),
    ("services.wine_queue_service", "_wine_queue_service"),
    ("services.edge_function_service", "_edge_function_service"),
    ("services.scan_service", "_scan_service"),
    ("services.tasting_service", "_tasting_service"),
    ("services.stats_service", "_stats_service"),
    ("services.sharing_service", "_sharing_service"),
)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("wines_added", [
                {"id": "job-1", "status": "pending", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock and reset service singletons.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("tastings", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with ExitStack() as stack:
        for module in CLIENT_MODULES:
            stack.enter_context(
                patch(f"{module}.get_supabase_client", return_value=mock_supabase)
            )
        for module, attr in SINGLETONS:
            stack.enter_context(patch(f"{module}.{attr}", None))
        yield mock_supabase


@pytest.fixture
def memory_store():
    """Empty in-memory pending tasting store."""
    from services.pending_tasting_store import InMemoryPendingTastingStore
    return InMemoryPendingTastingStore()


@pytest.fixture
def sync_service(mock_db, memory_store):
    """TastingSyncService on the mock client, no backoff, fixed clock."""
    from services.tasting_sync_service import TastingSyncService

    return TastingSyncService(
        memory_store,
        max_attempts=3,
        backoff_seconds=0,
        backoff_max_seconds=0,
        clock=lambda: datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)
    )


@pytest.fixture
def auth_headers(mock_supabase) -> dict:
    """Authorization header for user-1."""
    mock_supabase.auth.set_user("user-1", token="test-token")
    return {"Authorization": "Bearer test-token"}


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db, sync_service):
    """
    Create FastAPI test client with mocked database.

    The tasting sync singleton is the in-memory sync_service.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("tastings", [...])
            response = test_client_with_mock_db.get("/api/tastings")
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("services.tasting_sync_service._tasting_sync_service", sync_service):
        yield TestClient(app)
