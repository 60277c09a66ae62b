# services/booking_service.py
from db.db_operation import mongo_conn
from bson import ObjectId
from datetime import date
from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from typing import List, Optional
from models.booking import BookingCreate, BookingOut, BookingStats
from services.booking_status import next_status
from services.booking_stats import compute_stats, expected_guests
from services.realtime import change_relay
from settings.config import settings
from utils.clock import local_today, utc_now
from utils.logger import get_logger

logger = get_logger("Booking_Service")

TABLE = "bookings"

def _to_oid(booking_id: str) -> ObjectId:
    try:
        return ObjectId(booking_id)
    except Exception:
        raise ValueError("Invalid booking id")

def _parse_bookings(docs) -> List[BookingOut]:
    bookings = []
    for d in docs:
        try:
            bookings.append(BookingOut.from_doc(d))
        except ValidationError as e:
            logger.warning(f"Skipping malformed booking {d.get('_id')}: {e.error_count()} error(s)")
    return bookings

def date_query(mode: str, today: date, upcoming_includes_today: Optional[bool] = None) -> dict:
    if upcoming_includes_today is None:
        upcoming_includes_today = settings.UPCOMING_INCLUDES_TODAY
    today_str = today.isoformat()
    if mode == "today":
        return {"booking_date": today_str}
    if mode == "upcoming":
        op = "$gte" if upcoming_includes_today else "$gt"
        return {"booking_date": {op: today_str}}
    if mode == "all":
        return {}
    raise ValueError(f"Unknown filter mode '{mode}'")

async def create_booking(payload: BookingCreate, source: str = "public") -> BookingOut:
    """
    Insert a new reservation. Every booking starts as pending, whether it came
    from the public form or from a manual admin entry.
    """
    now = utc_now()
    doc = {
        "customer_name": payload.customer_name,
        "phone_number": payload.phone_number,
        "booking_date": payload.booking_date.isoformat(),
        "booking_time": payload.booking_time.strftime("%H:%M"),
        "party_size": payload.party_size,
        "status": "pending",
        "notes": payload.notes,
        "source": source,
        "created_at": now,
        "updated_at": now
    }
    try:
        result = await mongo_conn.bookings.insert_one(doc)
    except PyMongoError:
        logger.exception("DB error creating booking")
        raise
    booking = BookingOut.from_doc({**doc, "_id": result.inserted_id})
    logger.info("Booking created", extra={"booking_id": booking.id, "source": source})
    change_relay.publish(TABLE, "INSERT", booking)
    return booking

async def list_bookings(mode: str = "today", today: Optional[date] = None, upcoming_includes_today: Optional[bool] = None) -> List[BookingOut]:
    today = today or local_today()
    query = date_query(mode, today, upcoming_includes_today)
    cursor = mongo_conn.bookings.find(query).sort([("booking_date", ASCENDING), ("booking_time", ASCENDING)])
    docs = await cursor.to_list(length=None)
    logger.info(f"Fetched {len(docs)} bookings for filter '{mode}'")
    return _parse_bookings(docs)

async def get_booking(booking_id: str) -> BookingOut:
    doc = await mongo_conn.bookings.find_one({"_id": _to_oid(booking_id)})
    if not doc:
        raise ValueError("Booking not found")
    return BookingOut.from_doc(doc)

async def _write_status(booking_id: str, new_status: str, actor_email: Optional[str]) -> BookingOut:
    oid = _to_oid(booking_id)
    result = await mongo_conn.bookings.update_one(
        {"_id": oid},
        {"$set": {"status": new_status, "updated_at": utc_now()}}
    )
    if result.matched_count == 0:
        raise ValueError("Booking not found")
    booking = await get_booking(booking_id)
    logger.info(f"Booking {booking_id} status set to {new_status}", extra={"actor": actor_email})
    change_relay.publish(TABLE, "UPDATE", booking)
    return booking

async def apply_booking_action(booking_id: str, action: str, actor_email: Optional[str] = None) -> BookingOut:
    """Run a dashboard action (confirm, seat, ...) if it is offered for the current status."""
    booking = await get_booking(booking_id)
    new_status = next_status(booking.status, action)
    return await _write_status(booking_id, new_status, actor_email)

async def set_booking_status(booking_id: str, new_status: str, actor_email: Optional[str] = None) -> BookingOut:
    # no lifecycle check: storage accepts any status
    return await _write_status(booking_id, new_status, actor_email)

async def cancel_booking(booking_id: str, actor_email: Optional[str] = None) -> BookingOut:
    return await _write_status(booking_id, "cancelled", actor_email)

async def delete_booking(booking_id: str, actor_email: Optional[str] = None) -> dict:
    result = await mongo_conn.bookings.delete_one({"_id": _to_oid(booking_id)})
    if result.deleted_count == 0:
        raise ValueError("Booking not found")
    logger.info("Booking deleted", extra={"actor": actor_email, "booking_id": booking_id})
    change_relay.publish(TABLE, "DELETE", {"id": booking_id})
    return {"message": "deleted", "booking_id": booking_id}

async def todays_confirmed(today: Optional[date] = None) -> List[BookingOut]:
    """Today's confirmed bookings, the source of the expected-guests counter."""
    today = today or local_today()
    cursor = mongo_conn.bookings.find({"booking_date": today.isoformat(), "status": "confirmed"})
    return _parse_bookings(await cursor.to_list(length=None))

async def booking_stats(mode: str = "today", today: Optional[date] = None) -> BookingStats:
    """
    Counters for the dashboard. Expected guests always refer to today's
    confirmed bookings, whatever filter the snapshot uses.
    """
    today = today or local_today()
    snapshot = await list_bookings(mode, today)
    stats = compute_stats(snapshot, today)
    stats.expected_today = expected_guests(await todays_confirmed(today), today)
    return stats
