from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    min_order_value: float = Field(0, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    max_uses_per_customer: Optional[int] = Field(None, ge=1)
    active_from: datetime
    expires_at: datetime
    # Leave both empty for a coupon that applies to all products
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    is_active: bool = True

class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_order_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    max_uses_per_customer: Optional[int] = Field(None, ge=1)
    active_from: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    is_active: Optional[bool] = None

    @validator('code', 'discount_type', 'discount_value', 'min_order_value', 'active_from', 'expires_at', 'is_active')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class CouponResponse(BaseModel):
    id: str
    code: str
    owner_id: str
    discount_type: str
    discount_value: float
    min_order_value: float = 0
    max_discount: Optional[float] = None
    max_uses_per_customer: Optional[int] = None
    active_from: datetime
    expires_at: datetime
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    is_active: bool = True
    used_count: int = 0
    is_expired: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CouponListResponse(BaseModel):
    coupons: List[CouponResponse]
    total: int
    warning: Optional[str] = None
