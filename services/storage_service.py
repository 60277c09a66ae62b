# services/storage_service.py
"""Menu images kept in GridFS and served back through /media/{file_id}."""
import os
import uuid
from bson import ObjectId
from gridfs.errors import NoFile
from db.db_operation import mongo_conn
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("Storage_Service")

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

def public_url(file_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/media/{file_id}"

async def upload_image(filename: str, content_type: str, data: bytes) -> dict:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValueError(f"Unsupported image type '{content_type}'")
    if not data:
        raise ValueError("Empty file")
    if len(data) > settings.MAX_IMAGE_BYTES:
        raise ValueError("Image too large")
    ext = os.path.splitext(filename or "")[1].lower()
    stored_name = f"{uuid.uuid4().hex}{ext}"
    file_id = await mongo_conn.media.upload_from_stream(
        stored_name,
        data,
        metadata={"content_type": content_type, "original_name": filename}
    )
    logger.info("Image uploaded", extra={"file_id": str(file_id), "bytes": len(data)})
    return {"file_id": str(file_id), "url": public_url(str(file_id))}

async def open_image(file_id: str):
    """Returns (content_type, grid_out); raises ValueError when missing."""
    try:
        oid = ObjectId(file_id)
    except Exception:
        raise ValueError("Invalid file id")
    try:
        grid_out = await mongo_conn.media.open_download_stream(oid)
    except NoFile:
        raise ValueError("File not found")
    metadata = grid_out.metadata or {}
    return metadata.get("content_type", "application/octet-stream"), grid_out
