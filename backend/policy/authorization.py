"""
Authorization policy.

authorize() decides whether a principal may perform an action on a resource.
Rules are evaluated per role and the first matching rule wins:

  admin / main_admin  everything in their capability table
  vendor              own catalog records, own profile, own orders, customer
                      feedback addressed to them, vendor notifications
  customer            approved or global catalog records, self-authored
                      feedback and orders, active sliders

Ownership is compared with exact string equality; an empty owner never matches.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
import logging

from .errors import PermissionDenied
from .principal import Principal, Role, is_administrative

logger = logging.getLogger(__name__)


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    SUSPEND = "suspend"
    REINSTATE = "reinstate"
    MARK_READ = "mark_read"


class ResourceKind(str, Enum):
    VENDOR = "vendor"
    ADMIN_ACCOUNT = "admin_account"
    CATEGORY = "category"
    PRODUCT = "product"
    COUPON = "coupon"
    ORDER = "order"
    CUSTOMER = "customer"
    FEEDBACK = "feedback"
    NOTIFICATION = "notification"
    SLIDER = "slider"


# Resource kinds each administrative role may act on with any action
ADMINISTRATIVE_CAPABILITIES = {
    Role.MAIN_ADMIN: frozenset(ResourceKind),
    Role.ADMIN: frozenset(ResourceKind) - {ResourceKind.ADMIN_ACCOUNT},
}

VENDOR_OWNED_KINDS = frozenset({ResourceKind.PRODUCT, ResourceKind.CATEGORY, ResourceKind.COUPON})
CRUD_ACTIONS = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})

# Field holding the id of the principal that authored a customer-created record
AUTHOR_FIELDS = {
    ResourceKind.FEEDBACK: "author_id",
    ResourceKind.ORDER: "customer_id",
}


@dataclass(frozen=True)
class Resource:
    """A record together with the kind of collection it belongs to"""
    kind: ResourceKind
    record: Mapping[str, Any] = field(default_factory=dict)

    @property
    def owner_id(self) -> Optional[str]:
        if self.kind == ResourceKind.VENDOR:
            return self.record.get("id")
        if self.kind == ResourceKind.FEEDBACK:
            return self.record.get("vendor_id")
        return self.record.get("owner_id")

    @property
    def is_global(self) -> bool:
        return self.record.get("is_global") is True

    @property
    def is_approved(self) -> bool:
        return self.record.get("approval_state") == "approved"


@dataclass(frozen=True)
class Allow:
    allowed = True

    def __bool__(self):
        return True


@dataclass(frozen=True)
class Deny:
    reason: str
    allowed = False

    def __bool__(self):
        return False


def same_owner(owner_id: Optional[str], principal_owner_id: Optional[str]) -> bool:
    if not owner_id or not principal_owner_id:
        return False
    return str(owner_id) == str(principal_owner_id)


def _authorize_administrative(principal: Principal, action: Action, resource: Resource):
    capabilities = ADMINISTRATIVE_CAPABILITIES.get(principal.role, frozenset())
    if resource.kind in capabilities:
        return Allow()
    return Deny(f"{resource.kind.value} management is reserved for the main admin")


def _notification_addressed_to(record: Mapping[str, Any], audience: str, vendor_id: Optional[str] = None) -> bool:
    if record.get("target_audience") != audience or record.get("is_active") is False:
        return False
    vendor_ids = record.get("vendor_ids") or []
    return not vendor_ids or (vendor_id is not None and vendor_id in vendor_ids)


def _authorize_vendor(principal: Principal, action: Action, resource: Resource):
    vendor_id = principal.vendor_record_id
    if not vendor_id:
        return Deny("Vendor session is not linked to a vendor account")

    kind = resource.kind
    owns = same_owner(resource.owner_id, vendor_id)

    if kind in VENDOR_OWNED_KINDS:
        if action in CRUD_ACTIONS and owns:
            return Allow()
        if kind == ResourceKind.CATEGORY and action == Action.READ and resource.is_global:
            return Allow()
        if action == Action.CREATE:
            return Deny(f"Vendors can only create a {kind.value} for their own account")
        return Deny(f"This {kind.value} belongs to another account")

    if kind == ResourceKind.VENDOR:
        if action in (Action.READ, Action.UPDATE) and owns:
            return Allow()
        if action in (Action.READ, Action.UPDATE):
            return Deny("Vendors can only access their own profile")
        return Deny("Only administrators can change a vendor's account state")

    if kind == ResourceKind.ORDER:
        if action == Action.READ and owns:
            return Allow()
        return Deny("Vendors can only view their own orders")

    if kind == ResourceKind.FEEDBACK:
        if action == Action.READ and owns and resource.record.get("user_type") == Role.CUSTOMER.value:
            return Allow()
        return Deny("Vendors can only view customer feedback addressed to them")

    if kind == ResourceKind.NOTIFICATION:
        if action in (Action.READ, Action.MARK_READ) and _notification_addressed_to(resource.record, "vendors", vendor_id):
            return Allow()
        return Deny("Notification is not addressed to this vendor")

    if kind == ResourceKind.SLIDER and action == Action.READ and resource.record.get("status") == "active":
        return Allow()

    return Deny(f"Vendors cannot {action.value} {kind.value} records")


def _authorize_customer(principal: Principal, action: Action, resource: Resource):
    kind = resource.kind

    if kind in (ResourceKind.PRODUCT, ResourceKind.CATEGORY):
        if action == Action.READ and (resource.is_approved or resource.is_global):
            return Allow()
        return Deny(f"This {kind.value} is not available")

    if kind in AUTHOR_FIELDS:
        author_id = resource.record.get(AUTHOR_FIELDS[kind])
        if action == Action.CREATE and same_owner(author_id, principal.id):
            return Allow()
        return Deny(f"Customers can only submit their own {kind.value}")

    if kind == ResourceKind.NOTIFICATION:
        if action in (Action.READ, Action.MARK_READ) and _notification_addressed_to(resource.record, "customers"):
            return Allow()
        return Deny("Notification is not addressed to customers")

    if kind == ResourceKind.SLIDER and action == Action.READ and resource.record.get("status") == "active":
        return Allow()

    return Deny(f"Customers cannot {action.value} {kind.value} records")


def authorize(principal: Principal, action: Action, resource: Resource):
    """Return Allow() or Deny(reason). Pure; never touches the store."""
    if is_administrative(principal):
        return _authorize_administrative(principal, action, resource)
    if principal.role == Role.VENDOR:
        return _authorize_vendor(principal, action, resource)
    if principal.role == Role.CUSTOMER:
        return _authorize_customer(principal, action, resource)
    return Deny(f"Unknown role {principal.role}")


def enforce(principal: Principal, action: Action, resource: Resource) -> None:
    """Raise PermissionDenied unless authorize() allows the action"""
    decision = authorize(principal, action, resource)
    if not decision:
        logger.warning(
            f"Access denied - Principal: {principal.id} ({principal.role.value}), "
            f"Resource: {resource.kind.value}, Action: {action.value}, Reason: {decision.reason}"
        )
        raise PermissionDenied(decision.reason)

    logger.info(
        f"Access granted - Principal: {principal.id} ({principal.role.value}), "
        f"Resource: {resource.kind.value}, Action: {action.value}"
    )
