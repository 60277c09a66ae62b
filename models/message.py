from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List
from datetime import datetime

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v

class MessageOut(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "MessageOut":
        return cls.model_validate({**doc, "id": str(doc.get("_id", doc.get("id")))})

class ChatContact(BaseModel):
    user_id: str
    full_name: str = "Unknown User"
    role: str
    unread: int = 0

class UnreadCounts(BaseModel):
    counts: Dict[str, int] = Field(default_factory=dict)

class ThreadOut(BaseModel):
    peer_id: str
    messages: List[MessageOut] = Field(default_factory=list)
    unread: int = 0
