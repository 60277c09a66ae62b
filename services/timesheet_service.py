# services/timesheet_service.py
from db.db_operation import mongo_conn
from collections import defaultdict
from datetime import datetime, timezone
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from typing import List, Optional
from core.exceptions import ShiftConflict
from models.timesheet import TimesheetOut, ManualShiftCreate, ClockStatus, StaffPayroll, ShiftHistory
from services.payroll import weekly_summary, shift_history
from services.user_service import get_role, list_staff
from settings.config import settings
from utils.clock import restaurant_tz, utc_now
from utils.logger import get_logger

logger = get_logger("Timesheet_Service")

def _parse_timesheets(docs) -> List[TimesheetOut]:
    out = []
    for d in docs:
        try:
            out.append(TimesheetOut.from_doc(d))
        except ValidationError:
            logger.warning(f"Skipping malformed timesheet {d.get('_id')}")
    return out

async def current_shift(user_id: str) -> Optional[TimesheetOut]:
    doc = await mongo_conn.timesheets.find_one({"user_id": user_id, "is_open": True}, sort=[("clock_in", DESCENDING)])
    return TimesheetOut.from_doc(doc) if doc else None

async def clock_status(user_id: str) -> ClockStatus:
    shift = await current_shift(user_id)
    return ClockStatus(status="clocked_in" if shift else "clocked_out", shift=shift)

async def clock_in(user_id: str) -> TimesheetOut:
    if settings.ENFORCE_SINGLE_OPEN_SHIFT and await current_shift(user_id) is not None:
        logger.warning(f"Clock in refused, shift already open for {user_id}")
        raise ShiftConflict()
    now = utc_now()
    doc = {
        "user_id": user_id,
        "clock_in": now,
        "clock_out": None,
        "is_open": True,
        "is_manual": False,
        "admin_notes": None,
        "created_at": now,
        "updated_at": now
    }
    try:
        result = await mongo_conn.timesheets.insert_one(doc)
    except DuplicateKeyError:
        # lost a race against a concurrent clock in
        raise ShiftConflict()
    except PyMongoError:
        logger.exception(f"Clock in failed for {user_id}")
        raise
    logger.info(f"User {user_id} clocked in", extra={"timesheet_id": str(result.inserted_id)})
    return TimesheetOut.from_doc({**doc, "_id": result.inserted_id})

async def clock_out(user_id: str) -> TimesheetOut:
    now = utc_now()
    doc = await mongo_conn.timesheets.find_one_and_update(
        {"user_id": user_id, "is_open": True},
        {"$set": {"clock_out": now, "is_open": False, "updated_at": now}},
        sort=[("clock_in", DESCENDING)],
        return_document=ReturnDocument.AFTER
    )
    if doc is None:
        raise ValueError("Not clocked in")
    logger.info(f"User {user_id} clocked out", extra={"timesheet_id": str(doc["_id"])})
    return TimesheetOut.from_doc(doc)

async def create_manual_shift(staff_id: str, payload: ManualShiftCreate, actor_email: Optional[str] = None) -> TimesheetOut:
    """Record a closed shift on behalf of a staff member. Times are local to the restaurant."""
    if await get_role(staff_id) is None:
        raise ValueError("Staff member not found")
    tz = restaurant_tz()
    start = datetime.combine(payload.shift_date, payload.start_time, tzinfo=tz).astimezone(timezone.utc)
    end = datetime.combine(payload.shift_date, payload.end_time, tzinfo=tz).astimezone(timezone.utc)
    now = utc_now()
    doc = {
        "user_id": staff_id,
        "clock_in": start,
        "clock_out": end,
        "is_open": False,
        "is_manual": True,
        "admin_notes": payload.notes or None,
        "created_at": now,
        "updated_at": now
    }
    result = await mongo_conn.timesheets.insert_one(doc)
    logger.info("Manual shift created", extra={"actor": actor_email, "staff_id": staff_id, "timesheet_id": str(result.inserted_id)})
    return TimesheetOut.from_doc({**doc, "_id": result.inserted_id})

async def list_timesheets(user_id: Optional[str] = None) -> List[TimesheetOut]:
    q = {"user_id": user_id} if user_id else {}
    docs = await mongo_conn.timesheets.find(q).sort("clock_in", DESCENDING).to_list(length=None)
    return _parse_timesheets(docs)

async def staff_payroll(search: Optional[str] = None, now: Optional[datetime] = None) -> List[StaffPayroll]:
    """Weekly hours and estimated pay for every staff member."""
    staff = await list_staff()
    if search:
        term = search.lower()
        staff = [s for s in staff if term in s.full_name.lower()]
    by_user = defaultdict(list)
    for ts in await list_timesheets():
        by_user[ts.user_id].append(ts)
    tz = restaurant_tz()
    return [
        StaffPayroll(
            user_id=s.user_id,
            full_name=s.full_name,
            phone_number=s.phone_number,
            hourly_rate=s.hourly_rate,
            week=weekly_summary(by_user.get(s.user_id, []), s.hourly_rate, now=now, tz=tz)
        )
        for s in staff
    ]

async def staff_shift_history(user_id: str) -> ShiftHistory:
    role = await get_role(user_id)
    if role is None:
        raise ValueError("Staff member not found")
    sheets = await list_timesheets(user_id)
    return ShiftHistory(user_id=user_id, full_name=role.full_name, shifts=shift_history(sheets, tz=restaurant_tz()))
