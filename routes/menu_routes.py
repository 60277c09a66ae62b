from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status, Body
from models.menu import MenuItemCreate, MenuItemOut, MenuItemUpdate, ImageUploadOut
from services.menu_service import (
    create_menu_item, list_menu_items, list_all_menu_items, menu_categories,
    update_menu_item, delete_menu_item
)
from services.storage_service import upload_image, open_image
from core.authorization import require_owner
from routes.errors import client_error
from utils.logger import get_logger
from typing import List, Optional

logger = get_logger("Menu_Route")
router = APIRouter(prefix="/menu", tags=["Menu"])
admin_router = APIRouter(prefix="/admin/menu", tags=["Menu Manager"])
media_router = APIRouter(prefix="/media", tags=["Media"])

# Public: available items, optionally one category
@router.get("", response_model=List[MenuItemOut])
async def api_list_menu(category: Optional[str] = Query(None)):
    try:
        return await list_menu_items(category)
    except Exception:
        logger.exception("Error listing menu")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")

@router.get("/categories", response_model=List[str])
async def api_menu_categories():
    return await menu_categories()

@admin_router.get("", response_model=List[MenuItemOut], dependencies=[Depends(require_owner)])
async def api_list_all_items():
    return await list_all_menu_items()

@admin_router.post("", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
async def api_create_menu_item(payload: MenuItemCreate = Body(...), current_user = Depends(require_owner)):
    try:
        return await create_menu_item(payload, actor_email=current_user.email)
    except Exception:
        logger.exception("Error creating menu item")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")

@admin_router.patch("/{item_id}", response_model=MenuItemOut)
async def api_update_menu_item(item_id: str, payload: MenuItemUpdate = Body(...), current_user = Depends(require_owner)):
    try:
        return await update_menu_item(item_id, payload, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@admin_router.delete("/{item_id}")
async def api_delete_menu_item(item_id: str, current_user = Depends(require_owner)):
    try:
        return await delete_menu_item(item_id, actor_email=current_user.email)
    except ValueError as e:
        raise client_error(e)

@admin_router.post("/images", response_model=ImageUploadOut, dependencies=[Depends(require_owner)])
async def api_upload_image(file: UploadFile = File(...)):
    data = await file.read()
    try:
        return await upload_image(file.filename, file.content_type, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@media_router.get("/{file_id}")
async def api_get_media(file_id: str):
    try:
        content_type, grid_out = await open_image(file_id)
    except ValueError as e:
        raise client_error(e)
    data = await grid_out.read()
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "public, max-age=86400"})
