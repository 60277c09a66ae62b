from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo
import pytest
from models.timesheet import TimesheetOut
from services.payroll import (
    RUNNING_LABEL, estimate_pay, format_duration, shift_duration_label, shift_history,
    shift_minutes, split_minutes, week_start, weekly_summary
)

UTC = timezone.utc
# Wednesday
NOW = datetime(2024, 6, 5, 12, 0, tzinfo=UTC)

def sheet(id, start, end=None, is_manual=False):
    return TimesheetOut(id=id, user_id="staff-1", clock_in=start, clock_out=end, is_manual=is_manual)

def test_single_shift_scenario():
    ts = sheet("t1", datetime(2024, 6, 4, 9, 0, tzinfo=UTC), datetime(2024, 6, 4, 17, 30, tzinfo=UTC))
    summary = weekly_summary([ts], 10.00, now=NOW)
    assert summary.total_minutes == 510
    assert summary.hours_label == "8h 30m"
    assert summary.estimated_pay == "85.00"
    assert summary.is_working is False

@pytest.mark.parametrize("minutes", [0, 1, 59, 60, 61, 510, 1439, 10000])
def test_split_minutes_recombines(minutes):
    hours, mins = split_minutes(minutes)
    assert hours * 60 + mins == minutes
    assert 0 <= mins < 60

def test_shift_minutes_matches_timestamp_difference():
    start = datetime(2024, 6, 4, 9, 0, 0, tzinfo=UTC)
    end = start + timedelta(hours=3, minutes=17, seconds=59)
    assert shift_minutes(start, end) == 197

def test_naive_timestamps_are_treated_as_utc():
    start = datetime(2024, 6, 4, 9, 0)
    end = datetime(2024, 6, 4, 10, 0, tzinfo=UTC)
    assert shift_minutes(start, end) == 60

def test_open_shift_flags_working_but_adds_nothing():
    closed = sheet("t1", datetime(2024, 6, 3, 9, 0, tzinfo=UTC), datetime(2024, 6, 3, 11, 0, tzinfo=UTC))
    running = sheet("t2", datetime(2024, 6, 5, 8, 0, tzinfo=UTC))
    summary = weekly_summary([closed, running], 12.5, now=NOW)
    assert summary.is_working is True
    assert summary.total_minutes == 120
    assert summary.estimated_pay == "25.00"

def test_shifts_from_previous_week_are_excluded():
    last_sunday = sheet("old", datetime(2024, 6, 2, 18, 0, tzinfo=UTC), datetime(2024, 6, 2, 22, 0, tzinfo=UTC))
    monday = sheet("new", datetime(2024, 6, 3, 0, 0, tzinfo=UTC), datetime(2024, 6, 3, 1, 0, tzinfo=UTC))
    summary = weekly_summary([last_sunday, monday], 20, now=NOW)
    assert summary.total_minutes == 60

def test_week_start_is_monday_in_restaurant_timezone():
    tz = ZoneInfo("America/New_York")
    # 02:00 UTC Monday is still Sunday evening in New York
    start = week_start(datetime(2024, 6, 3, 2, 0, tzinfo=UTC), tz)
    assert start.date().isoformat() == "2024-05-27"
    assert start.weekday() == 0

def test_missing_rate_estimates_zero():
    ts = sheet("t1", datetime(2024, 6, 4, 9, 0, tzinfo=UTC), datetime(2024, 6, 4, 10, 0, tzinfo=UTC))
    assert weekly_summary([ts], None, now=NOW).estimated_pay == "0.00"
    assert estimate_pay(90, 9.99) == "14.99"

def test_duration_labels():
    assert format_duration(510) == "8h 30m"
    assert shift_duration_label(sheet("r", datetime(2024, 6, 5, 9, 0, tzinfo=UTC))) == RUNNING_LABEL

def test_shift_history_newest_first():
    older = sheet("a", datetime(2024, 6, 1, 9, 0, tzinfo=UTC), datetime(2024, 6, 1, 17, 0, tzinfo=UTC), is_manual=True)
    newer = sheet("b", datetime(2024, 6, 4, 13, 5, tzinfo=UTC))
    rows = shift_history([older, newer])
    assert [r.id for r in rows] == ["b", "a"]
    assert rows[0].end_label == "Now"
    assert rows[0].start_label == "1:05 PM"
    assert rows[0].duration_label == RUNNING_LABEL
    assert rows[1].day_label == "Sat, Jun 1, 2024"
    assert rows[1].duration_label == "8h 0m"
    assert rows[1].is_manual is True
