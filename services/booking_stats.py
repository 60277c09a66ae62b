# services/booking_stats.py
from datetime import date
from typing import Iterable, List
from models.booking import BookingOut, BookingStats

FILTER_MODES = ("today", "upcoming", "all")

def filter_bookings(bookings: Iterable[BookingOut], mode: str, today: date, upcoming_includes_today: bool = False) -> List[BookingOut]:
    """
    Apply a dashboard filter to a snapshot. booking_date is a calendar date,
    compared against the restaurant's local today.
    """
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode '{mode}'")
    if mode == "today":
        selected = [b for b in bookings if b.booking_date == today]
    elif mode == "upcoming":
        if upcoming_includes_today:
            selected = [b for b in bookings if b.booking_date >= today]
        else:
            selected = [b for b in bookings if b.booking_date > today]
    else:
        selected = list(bookings)
    return sorted(selected, key=lambda b: (b.booking_date, b.booking_time))

def expected_guests(bookings: Iterable[BookingOut], today: date) -> int:
    return sum(b.party_size for b in bookings if b.status == "confirmed" and b.booking_date == today)

def compute_stats(bookings: Iterable[BookingOut], today: date) -> BookingStats:
    bookings = list(bookings)
    stats = BookingStats(total=len(bookings), expected_today=expected_guests(bookings, today))
    for b in bookings:
        if b.status == "pending":
            stats.pending += 1
        elif b.status == "seated":
            stats.seated += 1
        elif b.status == "confirmed":
            stats.confirmed += 1
        else:
            stats.other += 1
    return stats
