from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from core.authorization import require_owner, require_team
from core.dependencies import CurrentUser
from models.user import StaffCreate, StaffUpdate, UserRoleOut
from models.timesheet import TimesheetOut, ManualShiftCreate, ClockStatus, StaffPayroll, ShiftHistory
from routes.errors import client_error
from services.user_service import create_staff_account, list_staff, update_staff_profile
from services.timesheet_service import (
    clock_in, clock_out, clock_status, create_manual_shift, staff_payroll, staff_shift_history
)
from utils.logger import get_logger

logger = get_logger("Staff_Route")

admin_router = APIRouter(prefix="/admin", tags=["Staff & Payroll"])
router = APIRouter(prefix="/staff", tags=["Time Clock"])

@admin_router.get("/staff", response_model=List[UserRoleOut], dependencies=[Depends(require_owner)])
async def api_list_staff():
    return await list_staff()

@admin_router.post("/staff", response_model=UserRoleOut, status_code=status.HTTP_201_CREATED)
async def api_create_staff(payload: StaffCreate, current_user: CurrentUser = Depends(require_owner)):
    try:
        return await create_staff_account(payload, actor_email=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@admin_router.patch("/staff/{user_id}", response_model=UserRoleOut)
async def api_update_staff(user_id: str, payload: StaffUpdate, current_user: CurrentUser = Depends(require_owner)):
    try:
        return await update_staff_profile(user_id, payload, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@admin_router.get("/timesheets", response_model=List[StaffPayroll], dependencies=[Depends(require_owner)])
async def api_payroll(search: Optional[str] = Query(None)):
    return await staff_payroll(search)

@admin_router.get("/timesheets/{user_id}", response_model=ShiftHistory, dependencies=[Depends(require_owner)])
async def api_shift_history(user_id: str):
    try:
        return await staff_shift_history(user_id)
    except ValueError as e:
        raise client_error(e)

@admin_router.post("/timesheets/{user_id}/manual", response_model=TimesheetOut, status_code=status.HTTP_201_CREATED)
async def api_manual_shift(user_id: str, payload: ManualShiftCreate, current_user: CurrentUser = Depends(require_owner)):
    try:
        return await create_manual_shift(user_id, payload, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@router.get("/timesheet", response_model=ClockStatus)
async def api_clock_status(current_user: CurrentUser = Depends(require_team)):
    return await clock_status(current_user.id)

@router.post("/timesheet/clock-in", response_model=TimesheetOut)
async def api_clock_in(current_user: CurrentUser = Depends(require_team)):
    # ShiftConflict (409) propagates as is
    return await clock_in(current_user.id)

@router.post("/timesheet/clock-out", response_model=TimesheetOut)
async def api_clock_out(current_user: CurrentUser = Depends(require_team)):
    try:
        return await clock_out(current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
