from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Query
from dependencies.rbac import require_vendor_read, require_vendor_update, require_vendor_lifecycle
from dependencies.services import get_store, get_lifecycle
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError, ValidationFailed
from policy.lifecycle import LifecycleState, VendorLifecycle
from policy.principal import Principal, Role
from routers.auth.auth import get_current_user
from routers.vendors.helpers import VENDOR_SEARCH_FIELDS, vendor_to_response
from routers.vendors.schemas import VendorUpdate, VendorResponse, VendorListResponse, VendorTransitionResponse
from store import DocumentStore, list_visible
from utils.notifications import notify_vendor_state
from utils.response_helpers import matches_search, paginate, to_http_exception
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendors", tags=["Vendors"])

TRANSITION_MESSAGES = {
    Action.APPROVE: "Vendor approved",
    Action.REJECT: "Vendor rejected",
    Action.SUSPEND: "Vendor suspended",
    Action.REINSTATE: "Vendor reinstated",
    Action.DELETE: "Vendor deleted",
}


@router.get("/", response_model=VendorListResponse)
async def list_vendors(
    state: Optional[LifecycleState] = Query(None, description="pending, active, suspended, rejected or deleted"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_vendor_read)
):
    """List vendor accounts. Vendors only ever see their own record."""
    try:
        filters = {"lifecycle_state": state.value} if state else None
        vendors, warning = await list_visible(store, current_user, ResourceKind.VENDOR, "vendors", filters)
        vendors = [v for v in vendors if matches_search(v, search, VENDOR_SEARCH_FIELDS)]

        return VendorListResponse(
            vendors=[vendor_to_response(v) for v in paginate(vendors, page, limit)],
            page=page,
            limit=limit,
            total=len(vendors),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"List vendors failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve vendors"
        )


def _own_vendor_id(current_user: Principal) -> str:
    if current_user.role != Role.VENDOR or not current_user.vendor_record_id:
        raise ValidationFailed("Only vendor accounts have a vendor profile")
    return current_user.vendor_record_id


@router.get("/me", response_model=VendorResponse)
async def get_my_vendor_profile(
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store)
):
    try:
        vendor = await store.get("vendors", _own_vendor_id(current_user))
        return vendor_to_response(vendor)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get vendor profile failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve vendor profile"
        )


async def _update_vendor(store: DocumentStore, current_user: Principal, vendor_id: str, update_data: VendorUpdate):
    vendor = await store.get("vendors", vendor_id)
    enforce(current_user, Action.UPDATE, Resource(ResourceKind.VENDOR, vendor))

    patch = update_data.model_dump(exclude_unset=True)
    if not patch:
        return vendor

    await store.update("vendors", vendor_id, patch)
    logger.info(f"Vendor {vendor_id} profile updated by {current_user.id}")
    return {**vendor, **patch}


@router.put("/me", response_model=VendorResponse)
async def update_my_vendor_profile(
    update_data: VendorUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store)
):
    try:
        vendor = await _update_vendor(store, current_user, _own_vendor_id(current_user), update_data)
        return vendor_to_response(vendor)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update vendor profile failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update vendor profile"
        )


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(
    vendor_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_vendor_read)
):
    try:
        vendor = await store.get("vendors", vendor_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.VENDOR, vendor))
        return vendor_to_response(vendor)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get vendor failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve vendor"
        )


@router.put("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: str,
    update_data: VendorUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_vendor_update)
):
    try:
        vendor = await _update_vendor(store, current_user, vendor_id, update_data)
        return vendor_to_response(vendor)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update vendor failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update vendor"
        )


# =================
# LIFECYCLE ROUTES (ADMIN)
# =================

async def _transition(
    action: Action,
    vendor_id: str,
    current_user: Principal,
    lifecycle: VendorLifecycle,
    background_tasks: BackgroundTasks
) -> VendorTransitionResponse:
    try:
        result = await lifecycle.transition(current_user, vendor_id, action)
        if result.changed:
            notify_vendor_state(background_tasks, result.vendor)

        message = TRANSITION_MESSAGES[action]
        if not result.changed:
            message = f"Vendor is already {result.vendor['lifecycle_state']}"

        return VendorTransitionResponse(
            vendor=vendor_to_response(result.vendor),
            changed=result.changed,
            message=message,
            warning=result.warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Vendor {action.value} failed for {vendor_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action.value} vendor"
        )


@router.post("/{vendor_id}/approve", response_model=VendorTransitionResponse)
async def approve_vendor(
    vendor_id: str,
    background_tasks: BackgroundTasks,
    current_user: Principal = Depends(get_current_user),
    lifecycle: VendorLifecycle = Depends(get_lifecycle),
    _: bool = Depends(require_vendor_lifecycle)
):
    """Admin only: approve a pending vendor"""
    return await _transition(Action.APPROVE, vendor_id, current_user, lifecycle, background_tasks)


@router.post("/{vendor_id}/reject", response_model=VendorTransitionResponse)
async def reject_vendor(
    vendor_id: str,
    background_tasks: BackgroundTasks,
    current_user: Principal = Depends(get_current_user),
    lifecycle: VendorLifecycle = Depends(get_lifecycle),
    _: bool = Depends(require_vendor_lifecycle)
):
    """Admin only: reject a pending vendor"""
    return await _transition(Action.REJECT, vendor_id, current_user, lifecycle, background_tasks)


@router.post("/{vendor_id}/suspend", response_model=VendorTransitionResponse)
async def suspend_vendor(
    vendor_id: str,
    background_tasks: BackgroundTasks,
    current_user: Principal = Depends(get_current_user),
    lifecycle: VendorLifecycle = Depends(get_lifecycle),
    _: bool = Depends(require_vendor_lifecycle)
):
    """Admin only: suspend an active vendor; its sessions stop working immediately"""
    return await _transition(Action.SUSPEND, vendor_id, current_user, lifecycle, background_tasks)


@router.post("/{vendor_id}/reinstate", response_model=VendorTransitionResponse)
async def reinstate_vendor(
    vendor_id: str,
    background_tasks: BackgroundTasks,
    current_user: Principal = Depends(get_current_user),
    lifecycle: VendorLifecycle = Depends(get_lifecycle),
    _: bool = Depends(require_vendor_lifecycle)
):
    """Admin only: reactivate a suspended vendor"""
    return await _transition(Action.REINSTATE, vendor_id, current_user, lifecycle, background_tasks)


@router.delete("/{vendor_id}", response_model=VendorTransitionResponse)
async def delete_vendor(
    vendor_id: str,
    background_tasks: BackgroundTasks,
    current_user: Principal = Depends(get_current_user),
    lifecycle: VendorLifecycle = Depends(get_lifecycle),
    _: bool = Depends(require_vendor_lifecycle)
):
    """Admin only: soft-delete an active vendor"""
    return await _transition(Action.DELETE, vendor_id, current_user, lifecycle, background_tasks)
