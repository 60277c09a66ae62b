from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = Field("Main", min_length=1)
    image_url: Optional[str] = None
    is_available: bool = True

class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

class MenuItemOut(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: str
    image_url: Optional[str] = None
    is_available: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "MenuItemOut":
        return cls.model_validate({**doc, "id": str(doc["_id"])})

class ImageUploadOut(BaseModel):
    file_id: str
    url: str
