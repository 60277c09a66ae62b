from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from core.authorization import require_owner
from models.review import FeedbackIn, FeedbackResult, ReviewOut
from services.review_service import submit_feedback, list_reviews
from utils.logger import get_logger

logger = get_logger("Review_Route")

router = APIRouter(prefix="/feedback", tags=["Feedback"])
admin_router = APIRouter(prefix="/admin/reviews", tags=["Reviews"])

@router.post("", response_model=FeedbackResult)
async def api_submit_feedback(payload: FeedbackIn):
    try:
        return await submit_feedback(payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@admin_router.get("", response_model=List[ReviewOut], dependencies=[Depends(require_owner)])
async def api_list_reviews():
    return await list_reviews()
