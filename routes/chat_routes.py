from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
from core.authorization import require_team
from core.dependencies import CurrentUser
from models.message import ChatContact, MessageCreate, MessageOut, ThreadOut
from routes.errors import client_error
from services.message_service import list_contacts, unread_counts, get_thread, send_message, mark_thread_read
from utils.logger import get_logger

logger = get_logger("Chat_Route")

router = APIRouter(prefix="/chat", tags=["Team Chat"])

@router.get("/contacts", response_model=List[ChatContact])
async def api_contacts(current_user: CurrentUser = Depends(require_team)):
    return await list_contacts(current_user.id)

@router.get("/unread", response_model=Dict[str, int])
async def api_unread(current_user: CurrentUser = Depends(require_team)):
    return await unread_counts(current_user.id)

@router.get("/{peer_id}", response_model=ThreadOut)
async def api_thread(peer_id: str, current_user: CurrentUser = Depends(require_team)):
    return await get_thread(current_user.id, peer_id)

@router.post("/{peer_id}/read")
async def api_mark_read(peer_id: str, current_user: CurrentUser = Depends(require_team)):
    unread = await mark_thread_read(current_user.id, peer_id)
    return {"peer_id": peer_id, "unread": unread}

@router.post("/{peer_id}", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def api_send(peer_id: str, payload: MessageCreate, current_user: CurrentUser = Depends(require_team)):
    try:
        return await send_message(current_user.id, peer_id, payload.content)
    except ValueError as e:
        raise client_error(e)
    except Exception:
        logger.exception("Failed to send message")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send message")
