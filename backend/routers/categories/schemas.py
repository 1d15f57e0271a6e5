from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class FoodType(str, Enum):
    VEG = "veg"
    NONVEG = "nonveg"
    BOTH = "both"


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    food_type: FoodType = FoodType.BOTH
    image_url: Optional[str] = Field(None, max_length=500)

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    food_type: Optional[FoodType] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @validator('name', 'food_type', 'is_active')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    food_type: str = FoodType.BOTH.value
    owner_id: str
    parent_id: Optional[str] = None
    is_global: bool = False
    approval_state: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CategoryWithChildrenResponse(CategoryResponse):
    children: List["CategoryWithChildrenResponse"] = []

CategoryWithChildrenResponse.model_rebuild()

class CategoryListResponse(BaseModel):
    categories: List[CategoryResponse]
    total: int
    warning: Optional[str] = None

class CategoryTreeResponse(BaseModel):
    categories: List[CategoryWithChildrenResponse]
    warning: Optional[str] = None

class ImageUploadResponse(BaseModel):
    """Response schema for image uploads"""
    image_url: str
    message: str
