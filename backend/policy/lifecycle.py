"""
Vendor lifecycle.

    pending --approve--> active --suspend--> suspended --reinstate--> active
    pending --reject---> rejected            active --delete--> deleted

rejected and deleted are terminal. Only administrators transition vendors.
Repeating a transition whose target is the current state is a no-op.

The vendor's credential is provisioned at registration, so no password is ever
kept on the vendor record; approval only flips the lifecycle state.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional
import logging

from config import MIN_VENDOR_PASSWORD_LENGTH
from .authorization import Action, Resource, ResourceKind, enforce
from .errors import AccountNotApproved, AlreadyExists, InvalidTransition, ValidationFailed
from .principal import Principal, Role

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REJECTED = "rejected"
    DELETED = "deleted"


TERMINAL_STATES = frozenset({LifecycleState.REJECTED, LifecycleState.DELETED})

# action -> (allowed source states, target state)
TRANSITIONS = {
    Action.APPROVE: (frozenset({LifecycleState.PENDING}), LifecycleState.ACTIVE),
    Action.REJECT: (frozenset({LifecycleState.PENDING}), LifecycleState.REJECTED),
    Action.SUSPEND: (frozenset({LifecycleState.ACTIVE}), LifecycleState.SUSPENDED),
    Action.REINSTATE: (frozenset({LifecycleState.SUSPENDED}), LifecycleState.ACTIVE),
    Action.DELETE: (frozenset({LifecycleState.ACTIVE}), LifecycleState.DELETED),
}

TIMESTAMP_FIELDS = {
    Action.APPROVE: "approved_at",
    Action.REJECT: "rejected_at",
    Action.SUSPEND: "suspended_at",
    Action.REINSTATE: "reinstated_at",
    Action.DELETE: "deleted_at",
}

# States in which an email is considered taken by an existing registration
OPEN_STATES = frozenset({LifecycleState.PENDING, LifecycleState.ACTIVE, LifecycleState.SUSPENDED})

MANUAL_LINK_WARNING = (
    "Vendor approved, but no login credential is linked to this account. "
    "Manual credential linkage is required before the vendor can sign in."
)
EXISTING_CREDENTIAL_WARNING = (
    "An account with this email already exists. "
    "The vendor will sign in with the existing password once approved."
)

NOT_APPROVED_MESSAGES = {
    LifecycleState.PENDING: "Your vendor account is pending admin approval.",
    LifecycleState.SUSPENDED: "Your vendor account has been suspended. Please contact support.",
    LifecycleState.REJECTED: "Your vendor application was rejected.",
    LifecycleState.DELETED: "This vendor account has been deleted.",
}


class TransitionResult(NamedTuple):
    vendor: Dict[str, Any]
    changed: bool
    warning: Optional[str] = None


def next_state(current: LifecycleState, action: Action) -> LifecycleState:
    """Target state of applying action to current; the current state itself when it is a no-op"""
    if action not in TRANSITIONS:
        raise InvalidTransition(f"'{action.value}' is not a vendor lifecycle action")

    sources, target = TRANSITIONS[action]
    if current == target:
        return current
    if current in TERMINAL_STATES:
        raise InvalidTransition(f"Vendor is {current.value} and can no longer change state")
    if current not in sources:
        raise InvalidTransition(f"Cannot {action.value} a vendor that is {current.value}")
    return target


def login_refusal(vendor: Dict[str, Any]) -> Optional[AccountNotApproved]:
    """AccountNotApproved for any vendor that is not active, else None"""
    state = LifecycleState(vendor.get("lifecycle_state") or LifecycleState.PENDING.value)
    if state == LifecycleState.ACTIVE:
        return None
    return AccountNotApproved(NOT_APPROVED_MESSAGES[state])


def pick_vendor(records):
    """Prefer the active registration, then any open one, when several share an email or credential"""
    for wanted in (frozenset({LifecycleState.ACTIVE}), OPEN_STATES):
        for record in records:
            if record.get("lifecycle_state") in {state.value for state in wanted}:
                return record
    return records[0] if records else None


async def ensure_vendor_active(store, principal: Principal) -> None:
    """Re-check a vendor principal against its Vendor record"""
    if principal.role != Role.VENDOR:
        return
    vendor = None
    if principal.vendor_record_id:
        vendor = await store.find_one("vendors", {"id": principal.vendor_record_id})
    if vendor is None:
        raise AccountNotApproved("Vendor account no longer exists.")
    refusal = login_refusal(vendor)
    if refusal is not None:
        raise refusal


class VendorLifecycle:
    def __init__(self, store, credentials, min_password_length: int = MIN_VENDOR_PASSWORD_LENGTH):
        self.store = store
        self.credentials = credentials
        self.min_password_length = min_password_length

    async def provision_credential(self, email: str, secret: str):
        """
        Create the vendor's external credential.
        Returns (credential_ref, warning); credential_ref is None when the email already has one.
        """
        if not secret or len(secret) < self.min_password_length:
            raise ValidationFailed(
                f"Password must be at least {self.min_password_length} characters. "
                "Please register again with a longer password."
            )
        try:
            credential_ref = await self.credentials.create_credential(email, secret, {"role": Role.VENDOR.value})
        except AlreadyExists:
            logger.warning(f"Credential for {email} already exists; registering without provisioning")
            return None, EXISTING_CREDENTIAL_WARNING
        return credential_ref, None

    async def register(self, registration: Dict[str, Any], secret: str) -> TransitionResult:
        """Self-registration: provision the credential, then store the vendor as pending"""
        email = registration["email"]
        existing = await self.store.find_many("vendors", {"email": email})
        if any(LifecycleState(v["lifecycle_state"]) in OPEN_STATES for v in existing):
            raise AlreadyExists("A vendor with this email is already registered")

        credential_ref, warning = await self.provision_credential(email, secret)

        record = {
            **registration,
            "lifecycle_state": LifecycleState.PENDING.value,
            "credential_ref": credential_ref,
        }
        vendor_id = await self.store.insert("vendors", record)
        logger.info(f"Vendor {vendor_id} registered and pending approval")
        return TransitionResult(await self.store.get("vendors", vendor_id), True, warning)

    async def transition(self, principal: Principal, vendor_id: str, action: Action) -> TransitionResult:
        vendor = await self.store.get("vendors", vendor_id)
        enforce(principal, action, Resource(ResourceKind.VENDOR, vendor))

        current = LifecycleState(vendor["lifecycle_state"])
        target = next_state(current, action)
        if target == current:
            logger.info(f"Vendor {vendor_id} already {current.value}; {action.value} is a no-op")
            return TransitionResult(vendor, False)

        warning = None
        if action == Action.APPROVE and not vendor.get("credential_ref"):
            warning = MANUAL_LINK_WARNING

        patch = {
            "lifecycle_state": target.value,
            TIMESTAMP_FIELDS[action]: datetime.now(timezone.utc),
        }
        await self.store.update("vendors", vendor_id, patch)
        logger.info(f"Vendor {vendor_id} {current.value} -> {target.value} by {principal.id}")
        return TransitionResult({**vendor, **patch}, True, warning)

    async def approve(self, principal: Principal, vendor_id: str) -> TransitionResult:
        return await self.transition(principal, vendor_id, Action.APPROVE)

    async def reject(self, principal: Principal, vendor_id: str) -> TransitionResult:
        return await self.transition(principal, vendor_id, Action.REJECT)

    async def suspend(self, principal: Principal, vendor_id: str) -> TransitionResult:
        return await self.transition(principal, vendor_id, Action.SUSPEND)

    async def reinstate(self, principal: Principal, vendor_id: str) -> TransitionResult:
        return await self.transition(principal, vendor_id, Action.REINSTATE)

    async def delete(self, principal: Principal, vendor_id: str) -> TransitionResult:
        return await self.transition(principal, vendor_id, Action.DELETE)
