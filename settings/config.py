import os
from pydantic_settings import BaseSettings
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """Configuration settings for the application."""
    PROJECT_NAME: str = "Restaurant Management API"
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "restaurant")

    SECRET_KEY: str = os.getenv("SECRET_KEY", "MySecretKey@123")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # "today" and "this week" are evaluated in the restaurant's timezone
    TIMEZONE: str = "UTC"
    UPCOMING_INCLUDES_TODAY: bool = False
    ENFORCE_SINGLE_OPEN_SHIFT: bool = True

    ONESIGNAL_APP_ID: Optional[str] = None
    ONESIGNAL_API_KEY: Optional[str] = None
    ONESIGNAL_URL: str = "https://onesignal.com/api/v1/notifications"
    NOTIFICATION_SEGMENT: str = "Total Subscriptions"

    PUBLIC_BASE_URL: str = "http://localhost:8000"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    RESTAURANT_NAME: str = "La Bella Cucina"
    RESTAURANT_PHONE: str = "+1234567890"
    RESTAURANT_WHATSAPP: str = "1234567890"
    RESTAURANT_ADDRESS: str = "123 Culinary Ave, Foodie City"
    GOOGLE_MAPS_LINK: str = "https://goo.gl/maps/example"
    HIGH_RATING_THRESHOLD: int = 4
    URGENT_RATING_THRESHOLD: int = 2

    class Config:
        env_file = ".env"

settings = Settings()
