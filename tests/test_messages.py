from datetime import datetime, timezone
import pytest
from pymongo.errors import PyMongoError
from db.db_operation import mongo_conn
from models.message import MessageCreate, MessageOut
from services import message_service
from services.message_service import count_unread_by_sender, mark_thread_read, send_message
from tests.conftest import FakeResult

ME = "staff-1"

def msg(id, sender, receiver, is_read=False):
    return MessageOut(id=id, sender_id=sender, receiver_id=receiver, content="hi", is_read=is_read,
                      created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))

def test_unread_grouped_by_sender():
    messages = [
        msg("1", "owner-1", ME),
        msg("2", "owner-1", ME),
        msg("3", "staff-2", ME),
        msg("4", "staff-2", ME, is_read=True),
        msg("5", ME, "owner-1"),
    ]
    assert count_unread_by_sender(messages, ME) == {"owner-1": 2, "staff-2": 1}

def test_no_unread_gives_empty_counts():
    assert count_unread_by_sender([msg("1", "owner-1", ME, is_read=True)], ME) == {}

def test_blank_message_body_is_rejected():
    with pytest.raises(ValueError):
        MessageCreate(content="   ")

class FakeMessages:
    def __init__(self, fail=False):
        self.fail = fail
        self.unread = 3
        self.calls = 0
        self.inserted = []

    async def update_many(self, query, update):
        self.calls += 1
        if self.fail:
            raise PyMongoError("connection reset")
        modified, self.unread = self.unread, 0
        return FakeResult(matched_count=modified, modified_count=modified)

    async def insert_one(self, doc):
        self.inserted.append(doc)
        return FakeResult(inserted_id="m-1")

async def test_mark_read_is_idempotent(monkeypatch):
    fake = FakeMessages()
    monkeypatch.setattr(mongo_conn, "messages", fake)
    assert await mark_thread_read(ME, "owner-1") == 0
    assert await mark_thread_read(ME, "owner-1") == 0
    assert fake.unread == 0
    assert fake.calls == 2

async def test_mark_read_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(mongo_conn, "messages", FakeMessages(fail=True))
    assert await mark_thread_read(ME, "owner-1") == 0

async def test_send_requires_content_and_receiver(monkeypatch):
    fake = FakeMessages()
    monkeypatch.setattr(mongo_conn, "messages", fake)
    with pytest.raises(ValueError):
        await send_message(ME, "owner-1", "  ")
    with pytest.raises(ValueError):
        await send_message(ME, "", "hello")
    assert fake.inserted == []

async def test_send_inserts_unread_message(monkeypatch):
    fake = FakeMessages()
    monkeypatch.setattr(mongo_conn, "messages", fake)

    async def fake_role(user_id):
        return object()

    monkeypatch.setattr(message_service, "get_role", fake_role)
    message = await send_message(ME, "owner-1", "Table 4 needs water")
    assert message.is_read is False
    assert message.id == "m-1"
    assert fake.inserted[0]["receiver_id"] == "owner-1"
