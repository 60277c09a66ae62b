from fastapi import APIRouter, Depends
from models.user import UserOut
from core.dependencies import get_current_user, CurrentUser

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/me", response_model=UserOut)
async def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user.model_dump()
