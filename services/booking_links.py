# services/booking_links.py
from datetime import datetime, timedelta, timezone
from typing import List
from urllib.parse import quote, urlencode
from models.booking import BookingOut, BookingLinks
from settings.config import settings
from utils.clock import restaurant_tz

FIRST_SLOT_HOUR = 10
LAST_SLOT_HOUR = 24
VISIT_DURATION = timedelta(minutes=90)

def available_slots() -> List[str]:
    """Half-hourly booking slots from opening until midnight."""
    slots = []
    for hour in range(FIRST_SLOT_HOUR, LAST_SLOT_HOUR):
        slots.append(f"{hour:02d}:00")
        slots.append(f"{hour:02d}:30")
    slots.append("00:00")
    return slots

def whatsapp_link(booking: BookingOut) -> str:
    message = (
        f"Hello {settings.RESTAURANT_NAME}, I would like to confirm my booking.\n\n"
        f"Date: {booking.booking_date.isoformat()}\n"
        f"Time: {booking.booking_time.strftime('%H:%M')}\n"
        f"Guests: {booking.party_size}\n"
        f"Name: {booking.customer_name}"
    )
    return f"https://wa.me/{settings.RESTAURANT_WHATSAPP}?text={quote(message)}"

def google_maps_link() -> str:
    return "https://www.google.com/maps/search/?" + urlencode({"api": 1, "query": settings.RESTAURANT_ADDRESS})

def google_calendar_link(booking: BookingOut) -> str:
    start = datetime.combine(booking.booking_date, booking.booking_time, tzinfo=restaurant_tz())
    end = start + VISIT_DURATION
    fmt = "%Y%m%dT%H%M%SZ"
    params = {
        "action": "TEMPLATE",
        "text": f"Dinner at {settings.RESTAURANT_NAME}",
        "dates": f"{start.astimezone(timezone.utc):{fmt}}/{end.astimezone(timezone.utc):{fmt}}",
        "details": f"Booking for {booking.party_size} people. Reserved under {booking.customer_name}.",
        "location": settings.RESTAURANT_ADDRESS,
    }
    return "https://www.google.com/calendar/render?" + urlencode(params, safe="/")

def booking_links(booking: BookingOut) -> BookingLinks:
    return BookingLinks(
        whatsapp=whatsapp_link(booking),
        google_maps=google_maps_link(),
        google_calendar=google_calendar_link(booking)
    )
