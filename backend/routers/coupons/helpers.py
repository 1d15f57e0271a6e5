from datetime import datetime, timezone
from typing import Any, Dict, Optional
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import AlreadyExists, ValidationFailed
from policy.principal import Principal
from routers.coupons.schemas import CouponResponse
from store import DocumentStore
from utils.response_helpers import safe_model_validate


def normalize_code(code: str) -> str:
    code = (code or "").strip().upper()
    if not code:
        raise ValidationFailed("Coupon code is required")
    return code


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_terms(coupon: Dict[str, Any]) -> None:
    """Checks on the merged coupon record, run before anything is written"""
    if as_utc(coupon["expires_at"]) <= as_utc(coupon["active_from"]):
        raise ValidationFailed("Expiry date must be after the active date")
    if coupon["discount_type"] == "percentage" and coupon["discount_value"] > 100:
        raise ValidationFailed("Percentage discount cannot exceed 100")
    if coupon.get("subcategory_id") and not coupon.get("category_id"):
        raise ValidationFailed("Select a category before choosing a subcategory")


async def ensure_unique_code(store: DocumentStore, code: str, coupon_id: Optional[str] = None) -> None:
    existing = await store.find_one("coupons", {"code": code})
    if existing is not None and existing["id"] != coupon_id:
        raise AlreadyExists(f"Coupon code {code} already exists")


async def validate_scope(store: DocumentStore, principal: Principal, coupon: Dict[str, Any]) -> None:
    """The category, and the subcategory under it, must exist and be readable"""
    category_id = coupon.get("category_id")
    if not category_id:
        return
    category = await store.get("categories", category_id)
    enforce(principal, Action.READ, Resource(ResourceKind.CATEGORY, category))

    subcategory_id = coupon.get("subcategory_id")
    if subcategory_id:
        subcategory = await store.get("categories", subcategory_id)
        enforce(principal, Action.READ, Resource(ResourceKind.CATEGORY, subcategory))
        if subcategory.get("parent_id") != category_id:
            raise ValidationFailed("Subcategory does not belong to the selected category")


def coupon_to_response(coupon: Dict[str, Any], now: Optional[datetime] = None) -> CouponResponse:
    now = now or datetime.now(timezone.utc)
    expired = as_utc(coupon["expires_at"]) <= now
    return safe_model_validate(CouponResponse, {**coupon, "is_expired": expired})
