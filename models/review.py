from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

FeedbackBranch = Literal["external_review", "internal_form"]

class FeedbackIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    customer_name: Optional[str] = None

class ReviewOut(BaseModel):
    id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    customer_name: Optional[str] = None
    created_at: Optional[datetime] = None
    urgent: bool = False

    @classmethod
    def from_doc(cls, doc: dict) -> "ReviewOut":
        return cls.model_validate({**doc, "id": str(doc["_id"])})

class FeedbackResult(BaseModel):
    branch: FeedbackBranch
    review_url: Optional[str] = None
    review: Optional[ReviewOut] = None
