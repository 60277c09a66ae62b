from pydantic import BaseModel, Field, PositiveInt
from typing import Optional, Literal
from datetime import date, time, datetime

BookingStatus = Literal["pending", "confirmed", "seated", "finished", "no_show", "cancelled"]

class BookingCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    booking_date: date
    booking_time: time
    party_size: PositiveInt
    notes: Optional[str] = None

class BookingOut(BaseModel):
    id: str
    customer_name: str
    phone_number: str
    booking_date: date
    booking_time: time
    party_size: PositiveInt
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "BookingOut":
        return cls.model_validate({**doc, "id": str(doc.get("_id", doc.get("id")))})

class StatusChangeRequest(BaseModel):
    status: BookingStatus

class BookingStats(BaseModel):
    total: int = 0
    pending: int = 0
    seated: int = 0
    confirmed: int = 0
    other: int = 0
    expected_today: int = 0

class BookingLinks(BaseModel):
    whatsapp: str
    google_maps: str
    google_calendar: str

class BookingCreated(BaseModel):
    success: bool = True
    message: str = "Booking confirmed"
    booking: BookingOut
    links: BookingLinks
