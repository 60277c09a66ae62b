from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import PyMongoError
from core.dependencies import get_current_user, CurrentUser
from models.user import UserLogin
from services.user_service import authenticate, sign_out
from utils.logger import get_logger

logger = get_logger("AUTH_ROUTE")

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/login")
async def login(user: UserLogin):
    logger.info(f"Login attempt for: {user.email}")
    try:
        return await authenticate(user.email, user.password)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    except PyMongoError as e:
        logger.error(f"Database error during login: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error")

@router.post("/logout")
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    """Revoke the caller's tokens; the session context is gone after this."""
    try:
        return await sign_out(current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
