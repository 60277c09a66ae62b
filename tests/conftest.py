from datetime import date, time, datetime, timezone
import pytest
from fastapi.testclient import TestClient

from core.dependencies import CurrentUser, get_current_user
from main import app
from models.booking import BookingOut

OWNER = CurrentUser(id="owner-1", email="owner@restaurant.com", full_name="Olivia Owner", role="owner")
STAFF = CurrentUser(id="staff-1", email="sam@restaurant.com", full_name="Sam Staff", role="staff")

def make_booking(id="b1", booking_date=date(2024, 6, 1), booking_time=time(19, 0), party_size=4, status="pending", updated_at=None, **kwargs):
    return BookingOut(
        id=id,
        customer_name=kwargs.pop("customer_name", "Ada"),
        phone_number=kwargs.pop("phone_number", "555-0101"),
        booking_date=booking_date,
        booking_time=booking_time,
        party_size=party_size,
        status=status,
        created_at=datetime(2024, 5, 30, 10, 0, tzinfo=timezone.utc),
        updated_at=updated_at or datetime(2024, 5, 30, 10, 0, tzinfo=timezone.utc),
        **kwargs
    )

@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def as_owner(client):
    app.dependency_overrides[get_current_user] = lambda: OWNER
    return client

@pytest.fixture
def as_staff(client):
    app.dependency_overrides[get_current_user] = lambda: STAFF
    return client

class FakeResult:
    def __init__(self, matched_count=0, modified_count=0, deleted_count=0, inserted_id=None):
        self.matched_count = matched_count
        self.modified_count = modified_count
        self.deleted_count = deleted_count
        self.inserted_id = inserted_id
