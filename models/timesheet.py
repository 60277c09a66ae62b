from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, time, datetime

class TimesheetOut(BaseModel):
    id: str
    user_id: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    is_manual: bool = False
    admin_notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "TimesheetOut":
        return cls.model_validate({**doc, "id": str(doc["_id"])})

class ManualShiftCreate(BaseModel):
    shift_date: date
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    notes: str = ""

    @model_validator(mode="after")
    def check_order(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

class ClockStatus(BaseModel):
    status: str
    shift: Optional[TimesheetOut] = None

class PayrollSummary(BaseModel):
    total_minutes: int
    hours_label: str
    estimated_pay: str
    is_working: bool

class ShiftRow(BaseModel):
    id: str
    day_label: str
    start_label: str
    end_label: str
    duration_label: str
    is_manual: bool = False

class StaffPayroll(BaseModel):
    user_id: str
    full_name: str
    phone_number: Optional[str] = None
    hourly_rate: Optional[float] = None
    week: PayrollSummary

class ShiftHistory(BaseModel):
    user_id: str
    full_name: str
    shifts: List[ShiftRow] = Field(default_factory=list)
