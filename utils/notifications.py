import requests
from requests.exceptions import RequestException
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("Notification_Service")

def build_booking_notification(booking) -> dict:
    return {
        "app_id": settings.ONESIGNAL_APP_ID,
        "headings": {"en": "New Reservation"},
        "contents": {
            "en": f"New Booking! {booking.booking_date.isoformat()} at {booking.booking_time.strftime('%H:%M')} for {booking.party_size} people."
        },
        "included_segments": [settings.NOTIFICATION_SEGMENT],
    }

def send_booking_notification(booking):
    """
    Fire-and-forget push to the admin segment. Failures are logged, never retried.
    """
    if not settings.ONESIGNAL_APP_ID or not settings.ONESIGNAL_API_KEY:
        logger.info("Push notifications not configured, skipping", extra={"booking_id": booking.id})
        return
    try:
        response = requests.post(
            settings.ONESIGNAL_URL,
            json=build_booking_notification(booking),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Basic {settings.ONESIGNAL_API_KEY}",
            },
            timeout=10
        )
        if response.status_code >= 400:
            logger.error(f"Push notification rejected: {response.status_code} {response.text}")
        else:
            logger.info("Notification sent to admin", extra={"booking_id": booking.id})
    except RequestException as e:
        logger.error("Failed to send notification", exc_info=e)
