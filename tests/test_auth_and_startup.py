import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from pymongo.errors import OperationFailure
import main
from core.dependencies import resolve_user
from db import db_operation
from db.db_operation import OPEN_SHIFT_INDEX, create_indexes, mongo_conn
from services import timesheet_service
from settings.config import settings
from tests.test_timesheet_service import FakeTimesheets
from utils.jwt_handler import create_access_token, decode_access_token

async def test_garbage_token_is_unauthorized():
    with pytest.raises(HTTPException) as exc:
        await resolve_user("not-a-jwt")
    assert exc.value.status_code == 401

def test_decode_rejects_tampered_token():
    token = create_access_token({"sub": "owner@restaurant.com", "token_version": 0})
    other = create_access_token({"sub": "sam@restaurant.com", "token_version": 0})
    assert decode_access_token(token)["sub"] == "owner@restaurant.com"
    forged = ".".join(token.split(".")[:2] + [other.split(".")[2]])
    with pytest.raises(ValueError):
        decode_access_token(forged)

def test_startup_pings_database_then_builds_indexes(monkeypatch):
    calls = []

    async def fake_connect():
        calls.append("connect")

    async def fake_indexes():
        calls.append("indexes")

    monkeypatch.setattr(mongo_conn, "connect", fake_connect)
    monkeypatch.setattr(main, "create_indexes", fake_indexes)
    with TestClient(main.app) as client:
        assert client.get("/").json()["status"] == "ok"
    assert calls == ["connect", "indexes"]

class IndexRecorder:
    def __init__(self):
        self.created = []
        self.dropped = []

    async def create_index(self, keys, **kwargs):
        self.created.append(kwargs.get("name", keys))

    async def drop_index(self, name):
        if name not in self.created:
            raise OperationFailure("index not found with name [%s]" % name)
        self.dropped.append(name)

@pytest.fixture
def recorders(monkeypatch):
    recs = {}
    for name in ("bookings", "menu_items", "users_collection", "user_roles", "timesheets", "messages"):
        recs[name] = IndexRecorder()
        monkeypatch.setattr(mongo_conn, name, recs[name])
    return recs

async def test_open_shift_index_built_when_enforced(recorders, monkeypatch):
    monkeypatch.setattr(db_operation.settings, "ENFORCE_SINGLE_OPEN_SHIFT", True)
    await create_indexes()
    assert OPEN_SHIFT_INDEX in recorders["timesheets"].created

async def test_open_shift_index_skipped_when_not_enforced(recorders, monkeypatch):
    monkeypatch.setattr(db_operation.settings, "ENFORCE_SINGLE_OPEN_SHIFT", False)
    await create_indexes()
    assert OPEN_SHIFT_INDEX not in recorders["timesheets"].created

async def test_overlapping_shifts_allowed_when_not_enforced(monkeypatch):
    sheets = FakeTimesheets()
    monkeypatch.setattr(mongo_conn, "timesheets", sheets)
    monkeypatch.setattr(settings, "ENFORCE_SINGLE_OPEN_SHIFT", False)
    await timesheet_service.clock_in("staff-1")
    await timesheet_service.clock_in("staff-1")
    assert len(sheets.docs) == 2
