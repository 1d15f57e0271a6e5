from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class FeedbackType(str, Enum):
    COMPLAINT = "complaint"
    SUGGESTION = "suggestion"
    COMPLIMENT = "compliment"
    GENERAL = "general"


class FeedbackCreate(BaseModel):
    vendor_id: Optional[str] = None
    type: FeedbackType = FeedbackType.GENERAL
    rating: Optional[int] = Field(None, ge=1, le=5)
    message: str = Field(..., min_length=1, max_length=2000)

class FeedbackResponse(BaseModel):
    id: str
    user_type: str
    author_id: Optional[str] = None
    user_name: Optional[str] = None
    vendor_id: Optional[str] = None
    type: str
    rating: Optional[int] = None
    message: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class FeedbackListResponse(BaseModel):
    feedback: List[FeedbackResponse]
    total: int
    average_rating: Optional[float] = None
    warning: Optional[str] = None
