from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from settings.config import settings
from db.db_operation import create_indexes, mongo_conn
from core.exceptions import AppException, app_exception_handler, global_exception_handler
from utils.logger import get_logger
from routes import auth, user_routes, booking_routes, menu_routes, review_routes, staff_routes, chat_routes, realtime_routes

logger = get_logger("main")

app = FastAPI(title="Restaurant Management API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

@app.get("/")
async def health_check():
    logger.info("Health check is successful")
    return {
        "status": "ok",
        "app": settings.PROJECT_NAME,
        "restaurant": settings.RESTAURANT_NAME,
        "message": "FastAPI is running"
    }

@app.on_event("startup")
async def startup_event():
    await mongo_conn.connect()
    await create_indexes()

app.include_router(auth.router)
app.include_router(user_routes.router)
app.include_router(booking_routes.router)
app.include_router(booking_routes.admin_router)
app.include_router(menu_routes.router)
app.include_router(menu_routes.admin_router)
app.include_router(menu_routes.media_router)
app.include_router(review_routes.router)
app.include_router(review_routes.admin_router)
app.include_router(staff_routes.admin_router)
app.include_router(staff_routes.router)
app.include_router(chat_routes.router)
app.include_router(realtime_routes.router)
