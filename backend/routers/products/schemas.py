from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class ProductStatus(str, Enum):
    AVAILABLE = "available"
    UPCOMING = "upcoming"
    CANCELLED = "cancelled"


class OfferKind(str, Enum):
    NONE = "none"
    BOGO = "bogo"
    BOGO_DIFFERENT_PRODUCT = "bogo_different_product"
    BUY_X_GET_Y = "buy_x_get_y"
    BUY_X_GET_Y_DIFFERENT_PRODUCT = "buy_x_get_y_different_product"


# Offer Schemas
class Offer(BaseModel):
    kind: OfferKind = OfferKind.NONE
    buy_quantity: Optional[int] = Field(None, ge=1)
    get_quantity: Optional[int] = Field(None, ge=1)
    free_product_id: Optional[str] = None
    max_applications_per_order: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=200)


# Product Schemas
class ProductCreate(BaseModel):
    category_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    food_type: str = Field("veg", pattern="^(veg|nonveg)$")
    unit: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    priority: int = 0
    original_price: float = Field(..., gt=0)
    selling_price: Optional[float] = Field(None, gt=0)
    status: ProductStatus = ProductStatus.AVAILABLE
    offer: Offer = Offer()
    # Honoured for administrators creating a product on behalf of a vendor
    owner_id: Optional[str] = None

    @validator('name')
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be blank')
        return v

    @validator('selling_price')
    def validate_selling_price(cls, v, values):
        if v is not None and 'original_price' in values and v > values['original_price']:
            raise ValueError('selling_price cannot be greater than original_price')
        return v

class ProductUpdate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    food_type: Optional[str] = Field(None, pattern="^(veg|nonveg)$")
    unit: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    priority: Optional[int] = None
    original_price: Optional[float] = Field(None, gt=0)
    selling_price: Optional[float] = Field(None, gt=0)
    status: Optional[ProductStatus] = None
    offer: Optional[Offer] = None

    @validator('category_id', 'name', 'food_type', 'priority', 'original_price', 'selling_price', 'status')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class ProductResponse(BaseModel):
    id: str
    owner_id: str
    category_id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    food_type: str = "veg"
    unit: Optional[str] = None
    size: Optional[str] = None
    priority: int = 0
    original_price: float
    selling_price: float
    discount: float
    status: str
    approval_state: str
    offer: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    page: int
    limit: int
    total: int
    warning: Optional[str] = None
