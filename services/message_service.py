# services/message_service.py
from collections import Counter
from db.db_operation import mongo_conn
from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from typing import Dict, Iterable, List
from models.message import MessageOut, ChatContact, ThreadOut
from services.realtime import change_relay
from services.user_service import get_role, list_roles
from utils.clock import utc_now
from utils.logger import get_logger

logger = get_logger("Message_Service")

TABLE = "messages"

def count_unread_by_sender(messages: Iterable[MessageOut], me: str) -> Dict[str, int]:
    """Group my unread received messages by sender."""
    counts = Counter(m.sender_id for m in messages if m.receiver_id == me and not m.is_read)
    return dict(counts)

def _parse_messages(docs) -> List[MessageOut]:
    out = []
    for d in docs:
        try:
            out.append(MessageOut.from_doc(d))
        except ValidationError:
            logger.warning(f"Skipping malformed message {d.get('_id')}")
    return out

async def send_message(sender_id: str, receiver_id: str, content: str) -> MessageOut:
    if not content or not content.strip():
        raise ValueError("Message content cannot be empty")
    if not sender_id:
        raise ValueError("Sender is not resolved")
    if not receiver_id:
        raise ValueError("No receiver selected")
    if await get_role(receiver_id) is None:
        raise ValueError("Receiver not found")
    now = utc_now()
    doc = {
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": content,
        "is_read": False,
        "created_at": now,
        "updated_at": now
    }
    try:
        result = await mongo_conn.messages.insert_one(doc)
    except PyMongoError:
        logger.exception("Failed to send message")
        raise
    message = MessageOut.from_doc({**doc, "_id": result.inserted_id})
    change_relay.publish(TABLE, "INSERT", message)
    return message

async def mark_thread_read(me: str, peer_id: str) -> int:
    """
    Best-effort: flag every unread message from `peer_id` to `me` as read.
    The caller's unread count for the peer is zero whatever the outcome.
    """
    try:
        result = await mongo_conn.messages.update_many(
            {"sender_id": peer_id, "receiver_id": me, "is_read": False},
            {"$set": {"is_read": True, "updated_at": utc_now()}}
        )
        if result.modified_count:
            logger.info(f"Marked {result.modified_count} message(s) from {peer_id} as read for {me}")
    except PyMongoError:
        logger.exception("Error marking as read")
    return 0

async def get_thread(me: str, peer_id: str) -> ThreadOut:
    unread = await mark_thread_read(me, peer_id)
    cursor = mongo_conn.messages.find({
        "$or": [
            {"sender_id": me, "receiver_id": peer_id},
            {"sender_id": peer_id, "receiver_id": me}
        ]
    }).sort("created_at", ASCENDING)
    messages = _parse_messages(await cursor.to_list(length=None))
    return ThreadOut(peer_id=peer_id, messages=messages, unread=unread)

async def unread_counts(me: str) -> Dict[str, int]:
    cursor = mongo_conn.messages.find({"receiver_id": me, "is_read": False})
    return count_unread_by_sender(_parse_messages(await cursor.to_list(length=None)), me)

async def list_contacts(me: str) -> List[ChatContact]:
    counts = await unread_counts(me)
    return [
        ChatContact(user_id=r.user_id, full_name=r.full_name, role=r.role, unread=counts.get(r.user_id, 0))
        for r in await list_roles()
        if r.user_id != me
    ]
