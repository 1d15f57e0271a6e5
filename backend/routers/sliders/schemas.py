from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class SliderKind(str, Enum):
    HOME = "home"
    CATEGORY = "category"


class SliderStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SliderCreate(BaseModel):
    kind: SliderKind = SliderKind.HOME
    title: str = Field(..., min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[str] = None
    link: Optional[str] = Field(None, max_length=500)
    position: int = Field(0, ge=0)
    status: SliderStatus = SliderStatus.ACTIVE

class SliderUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[str] = None
    link: Optional[str] = Field(None, max_length=500)
    position: Optional[int] = Field(None, ge=0)
    status: Optional[SliderStatus] = None

    @validator('title', 'position', 'status')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class SliderResponse(BaseModel):
    id: str
    kind: str
    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    link: Optional[str] = None
    position: int = 0
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class SliderListResponse(BaseModel):
    sliders: List[SliderResponse]
    total: int
    warning: Optional[str] = None
