from pydantic import BaseModel
from enum import Enum
from typing import Optional


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"
    MAIN_ADMIN = "main_admin"


ADMINISTRATIVE_ROLES = frozenset({Role.ADMIN, Role.MAIN_ADMIN})

# Owner id stamped on records created by administrators
ADMIN_OWNER = "admin"
MAIN_ADMIN_ID = "admin-main"


class Principal(BaseModel):
    """The authenticated actor of a request"""
    id: str
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None
    vendor_record_id: Optional[str] = None

    class Config:
        frozen = True


def is_administrative(principal: Principal) -> bool:
    return principal.role in ADMINISTRATIVE_ROLES


def owner_id_for(principal: Principal) -> Optional[str]:
    """Owner id stamped on records the principal creates"""
    if is_administrative(principal):
        return ADMIN_OWNER
    if principal.role == Role.VENDOR:
        return principal.vendor_record_id
    return principal.id
