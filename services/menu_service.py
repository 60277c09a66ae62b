from db.db_operation import mongo_conn
from bson import ObjectId
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
from typing import List, Optional
from models.menu import MenuItemCreate, MenuItemUpdate, MenuItemOut
from utils.clock import utc_now
from utils.logger import get_logger

logger = get_logger("Menu_Service")

def _to_oid(item_id: str) -> ObjectId:
    try:
        return ObjectId(item_id)
    except Exception:
        raise ValueError("Invalid item id")

def _parse_items(docs) -> List[MenuItemOut]:
    out = []
    for d in docs:
        try:
            out.append(MenuItemOut.from_doc(d))
        except ValidationError:
            logger.warning(f"Skipping malformed menu item {d.get('_id')}")
    return out

async def create_menu_item(payload: MenuItemCreate, actor_email: str = None) -> MenuItemOut:
    now = utc_now()
    doc = {
        "name": payload.name,
        "description": payload.description,
        "price": float(payload.price),
        "category": payload.category,
        "image_url": payload.image_url,
        "is_available": bool(payload.is_available),
        "created_at": now,
        "updated_at": now
    }
    try:
        result = await mongo_conn.menu_items.insert_one(doc)
    except PyMongoError:
        logger.exception("DB error creating menu item")
        raise
    logger.info("Menu item created", extra={"actor": actor_email, "item_id": str(result.inserted_id)})
    return MenuItemOut.from_doc({**doc, "_id": result.inserted_id})

async def list_menu_items(category: Optional[str] = None) -> List[MenuItemOut]:
    """Public menu: available items ordered by category, then name."""
    q = {"is_available": True}
    if category and category != "All":
        q["category"] = category
    cursor = mongo_conn.menu_items.find(q).sort([("category", ASCENDING), ("name", ASCENDING)])
    return _parse_items(await cursor.to_list(length=None))

async def list_all_menu_items() -> List[MenuItemOut]:
    cursor = mongo_conn.menu_items.find({}).sort("created_at", DESCENDING)
    return _parse_items(await cursor.to_list(length=None))

def categories_of(items: List[MenuItemOut]) -> List[str]:
    return ["All", *sorted({item.category for item in items})]

async def menu_categories() -> List[str]:
    return categories_of(await list_menu_items())

async def get_menu_item(item_id: str) -> Optional[MenuItemOut]:
    d = await mongo_conn.menu_items.find_one({"_id": _to_oid(item_id)})
    if not d:
        return None
    return MenuItemOut.from_doc(d)

async def update_menu_item(item_id: str, payload: MenuItemUpdate, actor_email: str = None) -> MenuItemOut:
    oid = _to_oid(item_id)
    update_doc = {k: v for k, v in payload.model_dump().items() if v is not None}
    if "price" in update_doc:
        update_doc["price"] = float(update_doc["price"])
    update_doc["updated_at"] = utc_now()
    result = await mongo_conn.menu_items.update_one({"_id": oid}, {"$set": update_doc})
    if result.matched_count == 0:
        raise ValueError("Menu item not found")
    logger.info("Menu item updated", extra={"actor": actor_email, "item_id": item_id})
    return await get_menu_item(item_id)

async def delete_menu_item(item_id: str, actor_email: str = None) -> dict:
    result = await mongo_conn.menu_items.delete_one({"_id": _to_oid(item_id)})
    if result.deleted_count == 0:
        raise ValueError("Menu item not found")
    logger.info("Menu item deleted", extra={"actor": actor_email, "item_id": item_id})
    return {"message": "deleted", "item_id": item_id}
