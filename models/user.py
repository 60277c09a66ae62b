from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

Role = Literal["owner", "staff"]

class StaffCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)

class StaffUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)

class UserRoleOut(BaseModel):
    user_id: str
    role: Role
    full_name: str = "Unknown Staff"
    phone_number: Optional[str] = None
    hourly_rate: Optional[float] = None
    email: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "UserRoleOut":
        data = {k: v for k, v in doc.items() if k != "_id" and v is not None}
        return cls.model_validate(data)

class UserOut(BaseModel):
    id: Optional[str] = None
    email: str
    role: Role
    full_name: Optional[str] = None
    token_version: int = 0

class UserLogin(BaseModel):
    email: EmailStr
    password: str
