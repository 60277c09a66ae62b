# services/payroll.py
"""
Weekly hours and pay estimates derived from timesheet records.

Pay uses the staff member's current hourly rate. Rates are not stored per
shift, so editing a rate changes the estimate for shifts already worked.
"""
from datetime import datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple
from models.timesheet import TimesheetOut, PayrollSummary, ShiftRow

RUNNING_LABEL = "Running..."

def _aware(dt: datetime) -> datetime:
    # documents written without tz info are UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def shift_minutes(clock_in: datetime, clock_out: datetime) -> int:
    """Whole minutes between two timestamps, truncated toward zero."""
    seconds = (_aware(clock_out) - _aware(clock_in)).total_seconds()
    return int(seconds / 60)

def split_minutes(total_minutes: int) -> Tuple[int, int]:
    return divmod(total_minutes, 60)

def format_duration(total_minutes: int) -> str:
    hours, minutes = split_minutes(total_minutes)
    return f"{hours}h {minutes}m"

def shift_duration_label(ts: TimesheetOut) -> str:
    if ts.clock_out is None:
        return RUNNING_LABEL
    return format_duration(shift_minutes(ts.clock_in, ts.clock_out))

def week_start(now: datetime, tz: tzinfo) -> datetime:
    """Monday 00:00 of the ISO week containing `now`, in `tz`."""
    local = _aware(now).astimezone(tz)
    monday = local.date() - timedelta(days=local.weekday())
    return datetime.combine(monday, time.min, tzinfo=tz)

def in_current_week(moment: datetime, now: datetime, tz: tzinfo) -> bool:
    start = week_start(now, tz)
    return start <= _aware(moment).astimezone(tz) < start + timedelta(days=7)

def estimate_pay(total_minutes: int, hourly_rate: Optional[float]) -> str:
    rate = Decimal(str(hourly_rate or 0))
    pay = Decimal(total_minutes) / Decimal(60) * rate
    return str(pay.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

def weekly_summary(timesheets: Iterable[TimesheetOut], hourly_rate: Optional[float], now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> PayrollSummary:
    """
    Sum closed shifts that started this week. An open shift adds nothing to
    the total but marks the staff member as currently working.
    """
    now = now or datetime.now(timezone.utc)
    total_minutes = 0
    is_working = False
    for ts in timesheets:
        if ts.clock_out is None:
            is_working = True
            continue
        if in_current_week(ts.clock_in, now, tz):
            total_minutes += shift_minutes(ts.clock_in, ts.clock_out)
    return PayrollSummary(
        total_minutes=total_minutes,
        hours_label=format_duration(total_minutes),
        estimated_pay=estimate_pay(total_minutes, hourly_rate),
        is_working=is_working
    )

def _clock_label(dt: datetime) -> str:
    return f"{dt.hour % 12 or 12}:{dt:%M} {dt:%p}"

def shift_history(timesheets: Iterable[TimesheetOut], tz: tzinfo = timezone.utc) -> List[ShiftRow]:
    rows = []
    for ts in sorted(timesheets, key=lambda t: _aware(t.clock_in), reverse=True):
        start = _aware(ts.clock_in).astimezone(tz)
        end = _aware(ts.clock_out).astimezone(tz) if ts.clock_out else None
        rows.append(ShiftRow(
            id=ts.id,
            day_label=f"{start:%a, %b} {start.day}, {start.year}",
            start_label=_clock_label(start),
            end_label=_clock_label(end) if end else "Now",
            duration_label=shift_duration_label(ts),
            is_manual=ts.is_manual
        ))
    return rows
