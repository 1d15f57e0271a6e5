from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List
from datetime import datetime


class AdminCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str

    @validator('email')
    def normalize_email(cls, v):
        return v.strip().lower()

class AdminResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    has_credential: bool = False
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class AdminListResponse(BaseModel):
    admins: List[AdminResponse]
    total: int
    warning: Optional[str] = None

class AdminCreateResponse(BaseModel):
    admin: AdminResponse
    message: str
    warning: Optional[str] = None
