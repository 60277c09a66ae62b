from datetime import datetime, timezone
from models.message import MessageOut, ThreadOut
from routes import chat_routes

def test_send_message(as_staff, monkeypatch):
    async def fake_send(sender_id, receiver_id, content):
        return MessageOut(id="m1", sender_id=sender_id, receiver_id=receiver_id, content=content,
                          created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))

    monkeypatch.setattr(chat_routes, "send_message", fake_send)
    response = as_staff.post("/chat/owner-1", json={"content": "Running late"})
    assert response.status_code == 201
    assert response.json()["is_read"] is False
    assert response.json()["sender_id"] == "staff-1"

def test_empty_message_rejected(as_staff):
    assert as_staff.post("/chat/owner-1", json={"content": "   "}).status_code == 422

def test_opening_thread_zeroes_unread(as_staff, monkeypatch):
    async def fake_thread(me, peer_id):
        return ThreadOut(peer_id=peer_id, messages=[], unread=0)

    monkeypatch.setattr(chat_routes, "get_thread", fake_thread)
    body = as_staff.get("/chat/owner-1").json()
    assert body["unread"] == 0
