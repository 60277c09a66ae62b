from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Path, Query, status
from pymongo.errors import PyMongoError
from typing import List
from core.authorization import require_owner, require_team
from core.dependencies import CurrentUser
from models.booking import BookingCreate, BookingOut, BookingCreated, BookingStats, StatusChangeRequest
from routes.errors import client_error
from services.booking_links import available_slots, booking_links
from services.booking_service import (
    create_booking, list_bookings, get_booking, apply_booking_action,
    set_booking_status, cancel_booking, delete_booking, booking_stats
)
from services.booking_status import allowed_actions
from utils.notifications import send_booking_notification
from utils.logger import get_logger

logger = get_logger("Booking_Route")

router = APIRouter(prefix="/bookings", tags=["Bookings"])
admin_router = APIRouter(prefix="/admin/bookings", tags=["Admin Bookings"])

MODE_PATTERN = "^(today|upcoming|all)$"

# Public: booking form submission
@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def api_create_booking(background_tasks: BackgroundTasks, payload: BookingCreate = Body(...)):
    try:
        booking = await create_booking(payload, source="public")
    except PyMongoError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create booking")
    background_tasks.add_task(send_booking_notification, booking)
    return BookingCreated(booking=booking, links=booking_links(booking))

@router.get("/slots", response_model=List[str])
async def api_slots():
    return available_slots()

@admin_router.get("", response_model=List[BookingOut], dependencies=[Depends(require_team)])
async def api_list_bookings(mode: str = Query("today", pattern=MODE_PATTERN)):
    try:
        return await list_bookings(mode)
    except PyMongoError:
        logger.exception("Error fetching bookings")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error fetching bookings")

@admin_router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def api_manual_booking(payload: BookingCreate = Body(...), current_user: CurrentUser = Depends(require_team)):
    logger.info(f"Manual booking entered by {current_user.email}")
    return await create_booking(payload, source="admin")

@admin_router.get("/stats", response_model=BookingStats, dependencies=[Depends(require_team)])
async def api_booking_stats(mode: str = Query("today", pattern=MODE_PATTERN)):
    return await booking_stats(mode)

@admin_router.get("/{booking_id}", dependencies=[Depends(require_team)])
async def api_get_booking(booking_id: str = Path(...)):
    try:
        booking = await get_booking(booking_id)
    except ValueError as e:
        raise client_error(e)
    return {"booking": booking, "actions": allowed_actions(booking.status)}

@admin_router.post("/{booking_id}/actions/{action}", response_model=BookingOut)
async def api_booking_action(booking_id: str, action: str, current_user: CurrentUser = Depends(require_team)):
    logger.info(f"Booking action {action} on {booking_id} by {current_user.email}")
    try:
        return await apply_booking_action(booking_id, action, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)
    except PyMongoError:
        logger.exception(f"Error updating status for {booking_id}")
        # hand back the stored record so the caller can drop its optimistic copy
        fresh = await get_booking(booking_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": "Failed to update status", "booking": fresh.model_dump(mode="json")}
        )

@admin_router.post("/{booking_id}/cancel", response_model=BookingOut)
async def api_cancel_booking(booking_id: str, current_user: CurrentUser = Depends(require_team)):
    try:
        return await cancel_booking(booking_id, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@admin_router.patch("/{booking_id}/status", response_model=BookingOut)
async def api_set_status(booking_id: str, payload: StatusChangeRequest, current_user: CurrentUser = Depends(require_owner)):
    try:
        return await set_booking_status(booking_id, payload.status, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@admin_router.delete("/{booking_id}")
async def api_delete_booking(booking_id: str, current_user: CurrentUser = Depends(require_owner)):
    try:
        return await delete_booking(booking_id, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)
