"""
Shared fakes for the VaultGuard test suite: an in-memory vault store and
a scripted authenticator that count their calls.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from vaultguard.errors import RemoteFailure
from vaultguard.models import ApplicationPassword, DevicePassword, HistoryEntry, record_from_dict

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def app_record(rid, password, days_old=0, name=None, account="me@example.com"):
    created = NOW - timedelta(days=days_old)
    return ApplicationPassword(
        id=rid, name=name or f"app-{rid}", password=password,
        account_name=account, created_at=created, updated_at=created,
    )


def device_record(rid, password, days_old=0, name=None):
    created = NOW - timedelta(days=days_old)
    return DevicePassword(
        id=rid, name=name or f"device-{rid}", password=password,
        created_at=created, updated_at=created,
    )


class FakeStore:
    def __init__(self, records=()):
        self.items = {r.id: r for r in records}
        self.history_rows = []
        self.calls = []
        self.fail_with = None
        self._ids = itertools.count(100)

    def _maybe_fail(self, op):
        self.calls.append(op)
        if self.fail_with is not None:
            raise self.fail_with

    async def list(self):
        self._maybe_fail("list")
        return list(self.items.values())

    async def get(self, password_id):
        self._maybe_fail("get")
        data = self.items[password_id].to_dict()
        data["lastViewed"] = NOW.isoformat()
        self.items[password_id] = record_from_dict(data)
        return self.items[password_id]

    async def create(self, fields):
        self._maybe_fail("create")
        data = dict(fields, id=str(next(self._ids)), createdAt=NOW.isoformat(), updatedAt=NOW.isoformat())
        rec = record_from_dict(data)
        self.items[rec.id] = rec
        return rec

    async def update(self, password_id, password):
        self._maybe_fail("update")
        if password_id not in self.items:
            raise RemoteFailure("not found", status=404)
        old = self.items[password_id]
        self.history_rows.append(HistoryEntry(
            id=str(len(self.history_rows) + 1), value=old.password,
            created_at=NOW, password_id=password_id,
        ))
        data = old.to_dict()
        data.update(password=password, updatedAt=NOW.isoformat())
        self.items[password_id] = record_from_dict(data)
        return self.items[password_id]

    async def remove(self, password_id):
        self._maybe_fail("remove")
        del self.items[password_id]

    async def history(self, password_id):
        self._maybe_fail("history")
        return [h for h in self.history_rows if h.password_id == password_id]


class FakeAuthenticator:
    def __init__(self, master="Correct-Horse-9"):
        self.master = master
        self.seen = []
        self.fail_with = None

    async def verify(self, candidate):
        self.seen.append(candidate)
        if self.fail_with is not None:
            raise self.fail_with
        return candidate == self.master


@pytest.fixture
def store():
    return FakeStore([
        app_record("a", "x"),
        app_record("b", "y"),
        device_record("c", "x"),
    ])


@pytest.fixture
def authenticator():
    return FakeAuthenticator()
