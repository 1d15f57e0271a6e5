from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from dependencies.rbac import require_product_read, require_product_write
from dependencies.services import get_store, get_blob_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError, ValidationFailed
from policy.principal import Principal, is_administrative, owner_id_for
from routers.auth.auth import get_current_user
from routers.categories.schemas import ImageUploadResponse
from routers.products.helpers import (
    PRODUCT_SEARCH_FIELDS, normalize_offer, price_fields, validate_category, validate_free_product
)
from routers.products.schemas import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse, ProductStatus
from store import DocumentStore, list_visible
from utils.response_helpers import matches_search, paginate, safe_model_validate, safe_model_validate_list, to_http_exception
from utils.storage import BlobStore, upload_image
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=ProductListResponse)
async def list_products(
    category_id: Optional[str] = Query(None),
    status_filter: Optional[ProductStatus] = Query(None, alias="status", description="available, upcoming or cancelled"),
    vendor_id: Optional[str] = Query(None, description="Admin only: products of one vendor, or 'admin'"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_product_read)
):
    """List products visible to the caller. Upcoming products are the dashboard's future items."""
    try:
        filters = {}
        if category_id:
            filters["category_id"] = category_id
        if status_filter:
            filters["status"] = status_filter.value
        if vendor_id and is_administrative(current_user):
            filters["owner_id"] = vendor_id

        products, warning = await list_visible(store, current_user, ResourceKind.PRODUCT, "products", filters)
        products = [p for p in products if matches_search(p, search, PRODUCT_SEARCH_FIELDS)]

        return ProductListResponse(
            products=safe_model_validate_list(ProductResponse, paginate(products, page, limit)),
            page=page,
            limit=limit,
            total=len(products),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing products: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get products"
        )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_product_read)
):
    try:
        product = await store.get("products", product_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.PRODUCT, product))
        return safe_model_validate(ProductResponse, product)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting product: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get product"
        )


async def _owner_for_new_product(store: DocumentStore, current_user: Principal, requested_owner: Optional[str]) -> str:
    if not is_administrative(current_user) or not requested_owner:
        return owner_id_for(current_user)
    if requested_owner != owner_id_for(current_user):
        vendor = await store.get("vendors", requested_owner)
        if vendor.get("lifecycle_state") != "active":
            raise ValidationFailed("Products can only be added for active vendors")
    return requested_owner


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_product_write)
):
    try:
        owner_id = await _owner_for_new_product(store, current_user, product_data.owner_id)
        await validate_category(store, current_user, product_data.category_id)

        offer = normalize_offer(product_data.offer)
        await validate_free_product(store, current_user, offer)

        record = {
            **product_data.model_dump(exclude={"owner_id", "offer", "original_price", "selling_price", "status"}),
            **price_fields(product_data.original_price, product_data.selling_price),
            "status": product_data.status.value,
            "offer": offer,
            "owner_id": owner_id,
            "approval_state": "approved",
        }
        enforce(current_user, Action.CREATE, Resource(ResourceKind.PRODUCT, record))

        product_id = await store.insert("products", record)
        logger.info(f"Product {product_id} created by {current_user.id} for owner {owner_id}")
        return safe_model_validate(ProductResponse, await store.get("products", product_id))

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating product: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product"
        )


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_product_write)
):
    try:
        product = await store.get("products", product_id)
        enforce(current_user, Action.UPDATE, Resource(ResourceKind.PRODUCT, product))

        patch = product_data.model_dump(exclude_unset=True, exclude={"offer", "original_price", "selling_price"})
        if patch.get("status") is not None:
            patch["status"] = product_data.status.value
        if patch.get("category_id"):
            await validate_category(store, current_user, patch["category_id"])

        if product_data.original_price is not None or product_data.selling_price is not None:
            original_price = product_data.original_price or product["original_price"]
            selling_price = product_data.selling_price
            if selling_price is None:
                selling_price = product["selling_price"]
            patch.update(price_fields(original_price, selling_price))

        if product_data.offer is not None:
            offer = normalize_offer(product_data.offer)
            if offer.get("free_product_id") == product_id:
                raise ValidationFailed("A product cannot be its own free product")
            await validate_free_product(store, current_user, offer)
            patch["offer"] = offer

        if patch:
            await store.update("products", product_id, patch)
            logger.info(f"Product {product_id} updated by {current_user.id}")

        return safe_model_validate(ProductResponse, {**product, **patch})

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating product: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product"
        )


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_product_write)
):
    try:
        product = await store.get("products", product_id)
        enforce(current_user, Action.DELETE, Resource(ResourceKind.PRODUCT, product))

        await store.delete("products", product_id)
        logger.info(f"Product {product_id} deleted by {current_user.id}")
        return {"message": "Product deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting product: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product"
        )


@router.post("/{product_id}/image", response_model=ImageUploadResponse)
async def upload_product_image(
    product_id: str,
    file: UploadFile = File(..., description="Product image (JPEG, PNG, GIF, or WebP, max 5MB)"),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    blob_store: BlobStore = Depends(get_blob_store),
    _: bool = Depends(require_product_write)
):
    try:
        product = await store.get("products", product_id)
        enforce(current_user, Action.UPDATE, Resource(ResourceKind.PRODUCT, product))

        image_url = await upload_image(blob_store, "products", product["owner_id"], file)
        await store.update("products", product_id, {"image_url": image_url})

        return ImageUploadResponse(
            image_url=image_url,
            message="Product image uploaded successfully"
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading product image: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload product image"
        )
