"""Shared fixtures: an in-memory event store and an app wired to it."""

import uuid
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from printdesk.analytics.aggregation import parse_timestamp
from printdesk.analytics.store import EventFilter
from printdesk.core.results import StoreResult


class FakeEventStore:
    """EventStore double that keeps rows in a list.

    ``fail_*`` flags make the matching call report a store error;
    ``raise_on_insert`` makes insert blow up instead, like a broken driver.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        fail_insert: bool = False,
        fail_query: bool = False,
        fail_count: bool = False,
        raise_on_insert: bool = False,
    ) -> None:
        self.rows = list(rows or [])
        self.inserted: list[dict[str, Any]] = []
        self.count_calls: list[EventFilter] = []
        self.query_calls: list[EventFilter] = []
        self.fail_insert = fail_insert
        self.fail_query = fail_query
        self.fail_count = fail_count
        self.raise_on_insert = raise_on_insert

    async def insert(self, row):
        if self.raise_on_insert:
            raise ConnectionError("store unreachable")
        if self.fail_insert:
            return StoreResult.failure("insert rejected", None)
        stored = {"id": str(uuid.uuid4()), **row}
        self.inserted.append(stored)
        self.rows.append(stored)
        return StoreResult.success(None)

    def _matching(self, flt: EventFilter) -> list[dict[str, Any]]:
        matched = []
        for row in self.rows:
            if flt.event_type is not None and row.get("event_type") != flt.event_type:
                continue
            if flt.user_id is not None and str(row.get("user_id")) != str(flt.user_id):
                continue
            if flt.session_id is not None and row.get("session_id") != flt.session_id:
                continue
            ts = parse_timestamp(row.get("timestamp"))
            if flt.start is not None and (ts is None or ts < flt.start):
                continue
            if flt.end is not None and (ts is None or ts >= flt.end):
                continue
            matched.append(row)
        return matched

    async def query(self, flt):
        self.query_calls.append(flt)
        if self.fail_query:
            return StoreResult.failure("query failed", [])
        rows = sorted(
            self._matching(flt),
            key=lambda r: str(r.get("timestamp") or ""),
            reverse=not flt.ascending,
        )
        if flt.limit is not None:
            rows = rows[: flt.limit]
        return StoreResult.success(rows)

    async def count(self, flt):
        self.count_calls.append(flt)
        if self.fail_count:
            return StoreResult.failure("count failed", 0)
        return StoreResult.success(len(self._matching(flt)))


def make_event(event_type: str, timestamp: str, user_id: str | None = None, session_id: str = "s-1", **data):
    return {
        "id": str(uuid.uuid4()),
        "event_type": event_type,
        "event_data": data,
        "user_id": user_id,
        "session_id": session_id,
        "timestamp": timestamp,
    }


@pytest.fixture
def fake_store():
    return FakeEventStore()


@pytest.fixture
def admin_user():
    return SimpleNamespace(id=uuid.uuid4(), email="admin@printdesk.test", role="admin")


@pytest.fixture
def regular_user():
    return SimpleNamespace(id=uuid.uuid4(), email="customer@printdesk.test", role="user")


@pytest.fixture
def api(fake_store):
    """TestClient factory bound to ``fake_store`` and an optional signed-in user."""
    from printdesk.core.database import get_db
    from printdesk.core.dependencies import get_event_store
    from printdesk.core.security import get_current_user, get_optional_user
    from printdesk.main import app

    async def no_db():
        yield None

    def build(user=None, store=None):
        app.dependency_overrides[get_event_store] = lambda: store or fake_store
        app.dependency_overrides[get_db] = no_db
        app.dependency_overrides[get_optional_user] = lambda: user
        if user is not None:
            app.dependency_overrides[get_current_user] = lambda: user
        else:
            app.dependency_overrides.pop(get_current_user, None)
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()
