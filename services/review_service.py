# services/review_service.py
from db.db_operation import mongo_conn
from pydantic import ValidationError
from pymongo import DESCENDING
from typing import List
from models.review import FeedbackIn, FeedbackResult, ReviewOut
from settings.config import settings
from utils.clock import utc_now
from utils.logger import get_logger

logger = get_logger("Review_Service")

def feedback_branch(rating: int) -> str:
    """High ratings are sent to the public review page instead of the comment form."""
    if rating >= settings.HIGH_RATING_THRESHOLD:
        return "external_review"
    return "internal_form"

def is_urgent(rating: int) -> bool:
    return rating <= settings.URGENT_RATING_THRESHOLD

async def submit_feedback(payload: FeedbackIn) -> FeedbackResult:
    branch = feedback_branch(payload.rating)
    if branch == "external_review":
        logger.info(f"Rating {payload.rating} routed to external review")
        return FeedbackResult(branch=branch, review_url=settings.GOOGLE_MAPS_LINK)

    comment = (payload.comment or "").strip()
    if not comment:
        raise ValueError("A comment is required")
    doc = {
        "rating": payload.rating,
        "comment": comment,
        "customer_name": (payload.customer_name or "").strip() or None,
        "created_at": utc_now()
    }
    result = await mongo_conn.reviews.insert_one(doc)
    logger.info("Review stored", extra={"review_id": str(result.inserted_id), "rating": payload.rating})
    review = ReviewOut.from_doc({**doc, "_id": result.inserted_id, "urgent": is_urgent(payload.rating)})
    return FeedbackResult(branch=branch, review=review)

async def list_reviews() -> List[ReviewOut]:
    docs = await mongo_conn.reviews.find({}).sort("created_at", DESCENDING).to_list(length=None)
    out = []
    for d in docs:
        try:
            review = ReviewOut.from_doc(d)
        except ValidationError:
            logger.warning(f"Skipping malformed review {d.get('_id')}")
            continue
        review.urgent = is_urgent(review.rating)
        out.append(review)
    return out
