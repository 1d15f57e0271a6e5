"""
RBAC dependencies for FastAPI routes
Coarse role gates that run after authentication; per-record checks happen in the handlers through policy.authorization
"""
from fastapi import HTTPException, status, Request
from policy.authorization import ADMINISTRATIVE_CAPABILITIES, Action, ResourceKind
from policy.principal import Principal, Role, is_administrative
import logging

logger = logging.getLogger(__name__)

CRUD = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})

# What each non-administrative role may ever do per resource kind, regardless of ownership
RESOURCES_FOR_ROLES = {
    Role.VENDOR: {
        ResourceKind.PRODUCT: CRUD,
        ResourceKind.CATEGORY: CRUD,
        ResourceKind.COUPON: CRUD,
        ResourceKind.VENDOR: frozenset({Action.READ, Action.UPDATE}),
        ResourceKind.ORDER: frozenset({Action.READ}),
        ResourceKind.FEEDBACK: frozenset({Action.READ}),
        ResourceKind.NOTIFICATION: frozenset({Action.READ, Action.MARK_READ}),
        ResourceKind.SLIDER: frozenset({Action.READ}),
    },
    Role.CUSTOMER: {
        ResourceKind.PRODUCT: frozenset({Action.READ}),
        ResourceKind.CATEGORY: frozenset({Action.READ}),
        ResourceKind.FEEDBACK: frozenset({Action.CREATE}),
        ResourceKind.ORDER: frozenset({Action.CREATE}),
        ResourceKind.NOTIFICATION: frozenset({Action.READ, Action.MARK_READ}),
        ResourceKind.SLIDER: frozenset({Action.READ}),
    },
}


def has_permission(principal: Principal, kind: ResourceKind, action: Action) -> bool:
    """Check if the principal's role may perform action on some record of this kind"""
    if is_administrative(principal):
        return kind in ADMINISTRATIVE_CAPABILITIES.get(principal.role, frozenset())
    return action in RESOURCES_FOR_ROLES.get(principal.role, {}).get(kind, frozenset())


def require_permission(kind: ResourceKind, action: Action):
    """
    Create an RBAC dependency that checks the current principal's role

    Args:
        kind: Resource kind the route operates on
        action: Action the route performs
    """
    def check_rbac(request: Request):
        """RBAC dependency function"""
        principal = getattr(request.state, 'current_user', None)
        if not isinstance(principal, Principal):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required"
            )

        if not has_permission(principal, kind, action):
            logger.warning(f"Access denied - Role: {principal.role.value}, Resource: {kind.value}, Action: {action.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {principal.role.value.replace('_', ' ').title()} role cannot {action.value} {kind.value} records"
            )

        logger.info(f"RBAC granted - Role: {principal.role.value}, Resource: {kind.value}, Action: {action.value}")
        return True

    return check_rbac

# Vendor accounts
require_vendor_read = require_permission(ResourceKind.VENDOR, Action.READ)
require_vendor_update = require_permission(ResourceKind.VENDOR, Action.UPDATE)
require_vendor_lifecycle = require_permission(ResourceKind.VENDOR, Action.APPROVE)

# Admin accounts (main admin only)
require_admin_accounts = require_permission(ResourceKind.ADMIN_ACCOUNT, Action.READ)
require_admin_accounts_write = require_permission(ResourceKind.ADMIN_ACCOUNT, Action.CREATE)

# Catalog
require_category_read = require_permission(ResourceKind.CATEGORY, Action.READ)
require_category_write = require_permission(ResourceKind.CATEGORY, Action.CREATE)
require_category_approve = require_permission(ResourceKind.CATEGORY, Action.APPROVE)

require_product_read = require_permission(ResourceKind.PRODUCT, Action.READ)
require_product_write = require_permission(ResourceKind.PRODUCT, Action.CREATE)

require_coupon_read = require_permission(ResourceKind.COUPON, Action.READ)
require_coupon_write = require_permission(ResourceKind.COUPON, Action.CREATE)

# Orders and customers
require_order_read = require_permission(ResourceKind.ORDER, Action.READ)
require_customer_read = require_permission(ResourceKind.CUSTOMER, Action.READ)

# Feedback
require_feedback_read = require_permission(ResourceKind.FEEDBACK, Action.READ)
require_feedback_write = require_permission(ResourceKind.FEEDBACK, Action.CREATE)

# Notifications
require_notification_read = require_permission(ResourceKind.NOTIFICATION, Action.READ)
require_notification_write = require_permission(ResourceKind.NOTIFICATION, Action.CREATE)

# Sliders
require_slider_write = require_permission(ResourceKind.SLIDER, Action.CREATE)
