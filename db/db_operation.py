from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorGridFSBucket
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure, PyMongoError
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("DB_OPERATION")

OPEN_SHIFT_INDEX = "one_open_shift_per_user"

async def create_indexes():
    await mongo_conn.bookings.create_index([("booking_date", ASCENDING), ("booking_time", ASCENDING)])
    await mongo_conn.bookings.create_index("status")
    await mongo_conn.menu_items.create_index([("category", ASCENDING), ("name", ASCENDING)])
    await mongo_conn.users_collection.create_index("email", unique=True)
    await mongo_conn.user_roles.create_index("user_id", unique=True)
    await mongo_conn.timesheets.create_index([("user_id", ASCENDING), ("clock_in", DESCENDING)])
    if settings.ENFORCE_SINGLE_OPEN_SHIFT:
        # at most one open shift per user
        await mongo_conn.timesheets.create_index(
            "user_id",
            name=OPEN_SHIFT_INDEX,
            unique=True,
            partialFilterExpression={"is_open": True}
        )
    else:
        try:
            await mongo_conn.timesheets.drop_index(OPEN_SHIFT_INDEX)
            logger.info(f"Dropped {OPEN_SHIFT_INDEX}, overlapping shifts allowed")
        except OperationFailure:
            logger.debug(f"{OPEN_SHIFT_INDEX} not present")
    await mongo_conn.messages.create_index([("receiver_id", ASCENDING), ("is_read", ASCENDING)])
    await mongo_conn.messages.create_index("created_at")
    logger.info("Indexes created")

class MongoConnection:
    def __init__(self):
        logger.info("Initializing MongoDB Connection")
        self.client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
        self.db = self.client[settings.DB_NAME]
        self.users_collection = self.db["users"]
        self.user_roles = self.db["user_roles"]
        self.bookings = self.db["bookings"]
        self.menu_items = self.db["menu_items"]
        self.reviews = self.db["reviews"]
        self.timesheets = self.db["timesheets"]
        self.messages = self.db["messages"]
        self._media = None

    @property
    def media(self) -> AsyncIOMotorGridFSBucket:
        # the bucket binds to the running loop, so build it on first use
        if self._media is None:
            self._media = AsyncIOMotorGridFSBucket(self.db, bucket_name="menu_images")
        return self._media

    async def connect(self):
        try:
            await self.db.command("ping")
            logger.info("Successfully connected to MongoDB and authenticated.")
            logger.info(f"Using Database: {settings.DB_NAME}")
        except PyMongoError as e:
            logger.error(f"Could not connect to MongoDB: {e}")
            raise e

mongo_conn = MongoConnection()
