from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import require_coupon_read, require_coupon_write
from dependencies.services import get_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError
from policy.principal import Principal, is_administrative, owner_id_for
from routers.auth.auth import get_current_user
from routers.coupons.helpers import (
    coupon_to_response, ensure_unique_code, normalize_code, validate_scope, validate_terms
)
from routers.coupons.schemas import CouponCreate, CouponUpdate, CouponResponse, CouponListResponse
from store import DocumentStore, list_visible
from utils.response_helpers import matches_search, to_http_exception
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.get("/", response_model=CouponListResponse)
async def list_coupons(
    vendor_id: Optional[str] = Query(None, description="Admin only: coupons of one vendor, or 'admin'"),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_coupon_read)
):
    try:
        filters = {}
        if vendor_id and is_administrative(current_user):
            filters["owner_id"] = vendor_id
        if is_active is not None:
            filters["is_active"] = is_active

        coupons, warning = await list_visible(store, current_user, ResourceKind.COUPON, "coupons", filters)
        coupons = [c for c in coupons if matches_search(c, search, ("code",))]

        return CouponListResponse(
            coupons=[coupon_to_response(c) for c in coupons],
            total=len(coupons),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing coupons: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get coupons"
        )


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_coupon_read)
):
    try:
        coupon = await store.get("coupons", coupon_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.COUPON, coupon))
        return coupon_to_response(coupon)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting coupon: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get coupon"
        )


@router.post("/", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    coupon_data: CouponCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_coupon_write)
):
    try:
        record = {
            **coupon_data.model_dump(),
            "code": normalize_code(coupon_data.code),
            "discount_type": coupon_data.discount_type.value,
            "owner_id": owner_id_for(current_user),
            "used_count": 0,
        }
        validate_terms(record)
        enforce(current_user, Action.CREATE, Resource(ResourceKind.COUPON, record))
        await validate_scope(store, current_user, record)
        await ensure_unique_code(store, record["code"])

        coupon_id = await store.insert("coupons", record)
        logger.info(f"Coupon {record['code']} ({coupon_id}) created by {current_user.id}")
        return coupon_to_response(await store.get("coupons", coupon_id))

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating coupon: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create coupon"
        )


@router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: str,
    coupon_data: CouponUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_coupon_write)
):
    try:
        coupon = await store.get("coupons", coupon_id)
        enforce(current_user, Action.UPDATE, Resource(ResourceKind.COUPON, coupon))

        patch = coupon_data.model_dump(exclude_unset=True)
        if "code" in patch:
            patch["code"] = normalize_code(patch["code"])
        if patch.get("discount_type") is not None:
            patch["discount_type"] = coupon_data.discount_type.value

        merged = {**coupon, **patch}
        validate_terms(merged)
        if "category_id" in patch or "subcategory_id" in patch:
            await validate_scope(store, current_user, merged)
        if "code" in patch and patch["code"] != coupon["code"]:
            await ensure_unique_code(store, patch["code"], coupon_id)

        if patch:
            await store.update("coupons", coupon_id, patch)
            logger.info(f"Coupon {coupon_id} updated by {current_user.id}")

        return coupon_to_response(merged)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating coupon: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update coupon"
        )


@router.delete("/{coupon_id}")
async def delete_coupon(
    coupon_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_coupon_write)
):
    try:
        coupon = await store.get("coupons", coupon_id)
        enforce(current_user, Action.DELETE, Resource(ResourceKind.COUPON, coupon))

        await store.delete("coupons", coupon_id)
        logger.info(f"Coupon {coupon_id} deleted by {current_user.id}")
        return {"message": "Coupon deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting coupon: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete coupon"
        )
