from typing import Any, Dict, Optional
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import ValidationFailed
from policy.principal import Principal
from routers.products.schemas import Offer, OfferKind
from store import DocumentStore

PRODUCT_SEARCH_FIELDS = ("name", "description")

DIFFERENT_PRODUCT_OFFERS = {OfferKind.BOGO_DIFFERENT_PRODUCT, OfferKind.BUY_X_GET_Y_DIFFERENT_PRODUCT}
QUANTITY_OFFERS = {OfferKind.BUY_X_GET_Y, OfferKind.BUY_X_GET_Y_DIFFERENT_PRODUCT}


def describe_offer(kind: OfferKind, buy_quantity: Optional[int] = None, get_quantity: Optional[int] = None) -> str:
    if kind == OfferKind.BOGO:
        return "Buy 1 Get 1 Free!"
    if kind == OfferKind.BOGO_DIFFERENT_PRODUCT:
        return "Buy 1 Get 1 Free (Different Product)!"
    if kind == OfferKind.BUY_X_GET_Y:
        return f"Buy {buy_quantity} Get {get_quantity} Free!"
    if kind == OfferKind.BUY_X_GET_Y_DIFFERENT_PRODUCT:
        return f"Buy {buy_quantity} Get {get_quantity} Free (Different Product)!"
    return "No active offer"


def normalize_offer(offer: Offer) -> Dict[str, Any]:
    """
    Validate an offer and reduce it to the fields its kind uses.

    BOGO variants are fixed at buy 1 / get 1; the buy-x-get-y variants need both
    quantities and the "different product" variants need the free product.
    """
    kind = offer.kind
    if kind == OfferKind.NONE:
        return {"kind": kind.value}

    if kind in QUANTITY_OFFERS:
        if not offer.buy_quantity or not offer.get_quantity:
            raise ValidationFailed("Please specify both buy and get quantities for this offer")
        buy_quantity, get_quantity = offer.buy_quantity, offer.get_quantity
    else:
        buy_quantity, get_quantity = 1, 1

    normalized = {
        "kind": kind.value,
        "buy_quantity": buy_quantity,
        "get_quantity": get_quantity,
        "max_applications_per_order": offer.max_applications_per_order or 0,
        "description": (offer.description or "").strip() or describe_offer(kind, buy_quantity, get_quantity),
    }

    if kind in DIFFERENT_PRODUCT_OFFERS:
        if not offer.free_product_id:
            raise ValidationFailed("Please select the free product for this offer")
        normalized["free_product_id"] = offer.free_product_id

    return normalized


def price_fields(original_price: float, selling_price: Optional[float]) -> Dict[str, float]:
    """Prices with the derived discount; selling price defaults to the original price"""
    selling = original_price if selling_price is None else selling_price
    if selling > original_price:
        raise ValidationFailed("Selling price cannot be greater than the original price")
    return {
        "original_price": original_price,
        "selling_price": selling,
        "discount": round(original_price - selling, 2),
    }


async def validate_category(store: DocumentStore, principal: Principal, category_id: str) -> Dict[str, Any]:
    category = await store.get("categories", category_id)
    enforce(principal, Action.READ, Resource(ResourceKind.CATEGORY, category))
    return category


async def validate_free_product(store: DocumentStore, principal: Principal, offer: Dict[str, Any]) -> None:
    free_product_id = offer.get("free_product_id")
    if not free_product_id:
        return
    product = await store.find_one("products", {"id": free_product_id})
    if product is None:
        raise ValidationFailed("The free product for this offer does not exist")
    enforce(principal, Action.READ, Resource(ResourceKind.PRODUCT, product))
