import asyncio
from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from core.authorization import check_role, TEAM_ROLES
from core.dependencies import resolve_user
from models.booking import BookingOut
from services.booking_service import list_bookings, todays_confirmed
from services.booking_stats import FILTER_MODES, compute_stats, expected_guests, filter_bookings
from services.realtime import change_relay, LiveList
from settings.config import settings
from utils.clock import local_today
from utils.logger import get_logger

logger = get_logger("Realtime_Route")

router = APIRouter(prefix="/ws", tags=["Realtime"])

async def _authorize(websocket: WebSocket, token: str):
    try:
        return check_role(await resolve_user(token), TEAM_ROLES)
    except HTTPException as e:
        logger.warning(f"WebSocket refused: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None

async def _drain_client(websocket: WebSocket):
    # returns once the client goes away
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")

def _log_pump_failure(task: asyncio.Task):
    if not task.cancelled() and task.exception() is not None:
        logger.error("Realtime feed stopped", exc_info=task.exception())

async def _run_feed(websocket: WebSocket, table: str, pump):
    queue = change_relay.subscribe(table)
    pump_task = asyncio.create_task(pump(queue))
    pump_task.add_done_callback(_log_pump_failure)
    try:
        await _drain_client(websocket)
    finally:
        pump_task.cancel()
        change_relay.unsubscribe(table, queue)

class BookingsView:
    """
    One connection's picture of the dashboard: the filtered bookings plus
    today's confirmed bookings, which drive the expected-guests counter
    whatever the filter.
    """

    def __init__(self, mode: str, today, bookings, confirmed):
        include_today = settings.UPCOMING_INCLUDES_TODAY
        self.mode = mode
        self.today = today
        self.listed = LiveList(
            BookingOut, bookings,
            predicate=lambda b: bool(filter_bookings([b], mode, today, include_today))
        )
        self.confirmed = LiveList(
            BookingOut, confirmed,
            predicate=lambda b: b.status == "confirmed" and b.booking_date == today
        )

    @classmethod
    async def load(cls, mode: str, today) -> "BookingsView":
        return cls(mode, today, await list_bookings(mode, today), await todays_confirmed(today))

    def apply(self, event) -> bool:
        # both lists validate the same model, so a malformed record fails on the first
        listed = self.listed.apply(event)
        confirmed = self.confirmed.apply(event)
        return listed or confirmed

    def records(self):
        return filter_bookings(self.listed, self.mode, self.today, settings.UPCOMING_INCLUDES_TODAY)

    def stats(self) -> dict:
        stats = compute_stats(self.listed, self.today)
        stats.expected_today = expected_guests(self.confirmed, self.today)
        return stats.model_dump()

@router.websocket("/bookings")
async def bookings_feed(websocket: WebSocket, token: str = Query(...), mode: str = Query("today")):
    """
    Sends the filtered bookings once, then every change that affects the view
    together with recomputed dashboard counters. When the restaurant's date
    rolls over the view is reloaded and a fresh snapshot is sent.
    """
    user = await _authorize(websocket, token)
    if user is None:
        return
    if mode not in FILTER_MODES:
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
        return
    await websocket.accept()
    logger.info(f"Bookings feed opened for {user.email} ({mode})")

    async def send_snapshot(view: BookingsView):
        await websocket.send_json({
            "type": "SNAPSHOT",
            "records": [b.model_dump(mode="json") for b in view.records()],
            "stats": view.stats()
        })

    async def pump(queue):
        view = await BookingsView.load(mode, local_today())
        await send_snapshot(view)
        while True:
            event = await queue.get()
            today = local_today()
            if today != view.today:
                logger.info(f"Day changed to {today}, reloading bookings feed for {user.email}")
                view = await BookingsView.load(mode, today)
                await send_snapshot(view)
                continue
            try:
                changed = view.apply(event)
            except ValueError:
                logger.warning(f"Rejected malformed {event.type} event for {event.record_id}")
                continue
            if changed:
                await websocket.send_json({
                    "type": event.type,
                    "event": event.model_dump(mode="json"),
                    "stats": view.stats()
                })

    await _run_feed(websocket, "bookings", pump)

@router.websocket("/messages")
async def messages_feed(websocket: WebSocket, token: str = Query(...)):
    """Forwards new messages sent by or addressed to the connected user."""
    user = await _authorize(websocket, token)
    if user is None:
        return
    await websocket.accept()
    logger.info(f"Messages feed opened for {user.email}")

    async def pump(queue):
        while True:
            event = await queue.get()
            if user.id in (event.record.get("sender_id"), event.record.get("receiver_id")):
                await websocket.send_json({"type": event.type, "event": event.model_dump(mode="json")})

    await _run_feed(websocket, "messages", pump)
