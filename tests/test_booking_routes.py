from datetime import date, time
from pymongo.errors import PyMongoError
from routes import booking_routes
from tests.conftest import make_booking

BOOKING_FORM = {
    "customer_name": "Ada",
    "phone_number": "555-0101",
    "booking_date": "2024-06-01",
    "booking_time": "19:00",
    "party_size": 4,
    "notes": "Window seat"
}

def test_public_booking_schedules_notification(client, monkeypatch):
    sent = []

    async def fake_create(payload, source="public"):
        assert source == "public"
        return make_booking("b1", payload.booking_date, payload.booking_time, payload.party_size, notes=payload.notes)

    monkeypatch.setattr(booking_routes, "create_booking", fake_create)
    monkeypatch.setattr(booking_routes, "send_booking_notification", lambda booking: sent.append(booking.id))
    response = client.post("/bookings", json=BOOKING_FORM)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["status"] == "pending"
    assert body["links"]["whatsapp"].startswith("https://wa.me/")
    assert sent == ["b1"]

def test_booking_form_requires_positive_party_size(client):
    response = client.post("/bookings", json={**BOOKING_FORM, "party_size": 0})
    assert response.status_code == 422

def test_slots(client):
    slots = client.get("/bookings/slots").json()
    assert slots[0] == "10:00"
    assert slots[-2:] == ["23:30", "00:00"]

def test_admin_list_requires_login(client):
    assert client.get("/admin/bookings").status_code == 401

def test_staff_can_list_bookings(as_staff, monkeypatch):
    async def fake_list(mode):
        assert mode == "upcoming"
        return [make_booking("b2", date(2024, 6, 2), time(12, 0))]

    monkeypatch.setattr(booking_routes, "list_bookings", fake_list)
    response = as_staff.get("/admin/bookings", params={"mode": "upcoming"})
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == ["b2"]

def test_invalid_filter_mode(as_staff):
    assert as_staff.get("/admin/bookings", params={"mode": "someday"}).status_code == 422

def test_confirm_action(as_staff, monkeypatch):
    async def fake_action(booking_id, action, actor_email=None):
        assert (booking_id, action) == ("b1", "confirm")
        return make_booking("b1", status="confirmed")

    monkeypatch.setattr(booking_routes, "apply_booking_action", fake_action)
    response = as_staff.post("/admin/bookings/b1/actions/confirm")
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

def test_action_not_offered_is_bad_request(as_staff, monkeypatch):
    async def fake_action(booking_id, action, actor_email=None):
        raise ValueError("Action 'seat' is not available for a 'pending' booking")

    monkeypatch.setattr(booking_routes, "apply_booking_action", fake_action)
    assert as_staff.post("/admin/bookings/b1/actions/seat").status_code == 400

def test_missing_booking_is_not_found(as_staff, monkeypatch):
    async def fake_action(booking_id, action, actor_email=None):
        raise ValueError("Booking not found")

    monkeypatch.setattr(booking_routes, "apply_booking_action", fake_action)
    assert as_staff.post("/admin/bookings/zzz/actions/confirm").status_code == 404

def test_status_override_is_owner_only(as_staff):
    response = as_staff.patch("/admin/bookings/b1/status", json={"status": "finished"})
    assert response.status_code == 403

def test_owner_can_set_any_status(as_owner, monkeypatch):
    async def fake_set(booking_id, new_status, actor_email=None):
        return make_booking(booking_id, status=new_status)

    monkeypatch.setattr(booking_routes, "set_booking_status", fake_set)
    response = as_owner.patch("/admin/bookings/b1/status", json={"status": "finished"})
    assert response.status_code == 200
    assert response.json()["status"] == "finished"

def test_failed_status_write_returns_stored_booking(as_staff, monkeypatch):
    async def fake_action(booking_id, action, actor_email=None):
        raise PyMongoError("connection reset")

    async def fake_get(booking_id):
        return make_booking(booking_id, status="pending")

    monkeypatch.setattr(booking_routes, "apply_booking_action", fake_action)
    monkeypatch.setattr(booking_routes, "get_booking", fake_get)
    response = as_staff.post("/admin/bookings/b1/actions/confirm")
    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["message"] == "Failed to update status"
    assert detail["booking"]["id"] == "b1"
    assert detail["booking"]["status"] == "pending"

def test_staff_can_cancel_booking(as_staff, monkeypatch):
    async def fake_cancel(booking_id, actor_email=None):
        assert actor_email == "sam@restaurant.com"
        return make_booking(booking_id, status="cancelled")

    monkeypatch.setattr(booking_routes, "cancel_booking", fake_cancel)
    response = as_staff.post("/admin/bookings/b1/cancel")
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

def test_cancel_unknown_booking(as_staff, monkeypatch):
    async def fake_cancel(booking_id, actor_email=None):
        raise ValueError("Booking not found")

    monkeypatch.setattr(booking_routes, "cancel_booking", fake_cancel)
    assert as_staff.post("/admin/bookings/zzz/cancel").status_code == 404
