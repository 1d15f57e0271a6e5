from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    INFO = "info"
    PROMOTION = "promotion"
    ALERT = "alert"
    UPDATE = "update"


class TargetAudience(str, Enum):
    CUSTOMERS = "customers"
    VENDORS = "vendors"


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    type: NotificationType = NotificationType.INFO
    target_audience: TargetAudience
    # Empty means every vendor; only meaningful for the vendors audience
    vendor_ids: List[str] = []
    image_url: Optional[str] = Field(None, max_length=500)
    expires_at: Optional[datetime] = None

class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: str
    target_audience: str
    vendor_ids: List[str] = []
    image_url: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True
    created_by: str
    created_by_role: str
    read_count: int = 0
    is_read: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int
    warning: Optional[str] = None
