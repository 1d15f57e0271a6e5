from pydantic import BaseModel, EmailStr
from typing import Optional
from routers.vendors.schemas import VendorResponse

# Request schemas
class UserLogin(BaseModel):
    email: EmailStr
    password: str

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

# Response schemas
class PrincipalResponse(BaseModel):
    id: str
    role: str
    email: Optional[str] = None
    name: Optional[str] = None
    vendor_record_id: Optional[str] = None

class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: PrincipalResponse

class RegisterResponse(BaseModel):
    vendor: VendorResponse
    message: str
    warning: Optional[str] = None
