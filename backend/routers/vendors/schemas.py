from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List
from datetime import datetime


class VendorProfileFields(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    restaurant_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class VendorRegister(VendorProfileFields):
    email: EmailStr
    password: str
    confirm_password: str

    @validator('email')
    def normalize_email(cls, v):
        return v.strip().lower()

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'password' in values and v != values['password']:
            raise ValueError('Passwords do not match')
        return v


class VendorUpdate(BaseModel):
    """Profile fields a vendor (or an admin) may edit. Lifecycle state is not editable here."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    restaurant_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @validator('name', 'restaurant_name')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v


class VendorResponse(BaseModel):
    id: str
    name: str
    restaurant_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    lifecycle_state: str
    has_credential: bool = False
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    suspended_at: Optional[datetime] = None
    reinstated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VendorListResponse(BaseModel):
    vendors: List[VendorResponse]
    page: int
    limit: int
    total: int
    warning: Optional[str] = None


class VendorTransitionResponse(BaseModel):
    vendor: VendorResponse
    changed: bool
    message: str
    warning: Optional[str] = None
