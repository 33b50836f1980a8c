# tests/conftest.py
import itertools
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# put the project root (the folder holding data_integrator.py) first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from domain.models import SessionContext  # noqa: E402


class FakeStore:
    """
    In-memory stand-in for RecordStore.

    `failures[(operation, table)] = "message"` makes that call fail;
    `calls` records every (operation, table) in order.
    """

    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.calls = []
        self.profiles = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def _fail(self, operation, table_name):
        self.calls.append((operation, table_name))
        return self.failures.get((operation, table_name))

    def rows(self, table_name):
        return self.tables.setdefault(table_name, [])

    def add(self, table_name, **row):
        """Seed a row directly, bypassing failure injection."""
        row.setdefault("id", str(next(self._ids)))
        if "created_at" not in row:
            self._clock += timedelta(minutes=1)
            row["created_at"] = self._clock.isoformat()
        self.rows(table_name).append(dict(row))
        return dict(row)

    def select(self, table_name, filters=None, order_by=None, desc=True, columns="*"):
        error = self._fail("select", table_name)
        if error:
            return False, error, []
        rows = [
            dict(r) for r in self.rows(table_name)
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=desc)
        return True, "Fetched" if rows else "No rows found", rows

    def insert(self, table_name, row):
        error = self._fail("insert", table_name)
        if error:
            return False, error, None
        return True, "Inserted", self.add(table_name, **row)

    def update(self, table_name, row_id, fields):
        error = self._fail("update", table_name)
        if error:
            return False, error, None
        for r in self.rows(table_name):
            if r["id"] == row_id:
                r.update(fields)
                return True, "Updated", dict(r)
        return False, f"No row with id {row_id} in {table_name}", None

    def delete(self, table_name, row_id):
        error = self._fail("delete", table_name)
        if error:
            return False, error, None
        self.tables[table_name] = [r for r in self.rows(table_name) if r["id"] != row_id]
        return True, "Deleted", None

    def upsert(self, table_name, rows, conflict_cols):
        error = self._fail("upsert", table_name)
        if error:
            return False, error, []
        return True, "Upserted", [self.add(table_name, **r) for r in rows]

    def fetch_profile(self, user_id):
        error = self._fail("select", "profiles")
        if error:
            return False, error, None
        return True, "Fetched", self.profiles.get(user_id)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def session():
    return SessionContext(user_id="user-1", email="ana@example.com", full_name="Ana", is_admin=False)


@pytest.fixture
def quote_form():
    return {
        "customer_name": "João Silva",
        "phone": "(11) 98765-4321",
        "address": "Rua das Flores, 10",
        "type": "porta_completa",
        "height": "200",
        "width": "100",
        "frame_width": "",
        "needs_installation": True,
        "lock_included": False,
        "hinge_included": False,
        "total_price": 0,
        "status": "pending",
    }
