from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from dependencies.rbac import require_category_read, require_category_write, require_category_approve
from dependencies.services import get_store, get_blob_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError, ValidationFailed
from policy.principal import ADMIN_OWNER, Principal, is_administrative, owner_id_for
from routers.auth.auth import get_current_user
from routers.categories.helpers import build_tree, validate_parent
from routers.categories.schemas import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryWithChildrenResponse,
    CategoryListResponse, CategoryTreeResponse, ImageUploadResponse
)
from store import DocumentStore, list_visible
from utils.response_helpers import matches_search, safe_model_validate, safe_model_validate_list, to_http_exception
from utils.storage import BlobStore, upload_image
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=CategoryListResponse)
async def list_categories(
    parent_id: Optional[str] = Query(None, description="Only direct children of this category"),
    main_only: bool = Query(False, description="Only main (top-level) categories"),
    approval_state: Optional[str] = Query(None, description="pending or approved"),
    search: Optional[str] = Query(None),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_read)
):
    try:
        filters = {}
        if parent_id:
            filters["parent_id"] = parent_id
        elif main_only:
            filters["parent_id"] = None
        if approval_state:
            filters["approval_state"] = approval_state

        categories, warning = await list_visible(
            store, current_user, ResourceKind.CATEGORY, "categories", filters, order_by="name", descending=False
        )
        categories = [c for c in categories if matches_search(c, search, ("name", "description"))]

        return CategoryListResponse(
            categories=safe_model_validate_list(CategoryResponse, categories),
            total=len(categories),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing categories: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get categories"
        )


@router.get("/tree", response_model=CategoryTreeResponse)
async def get_category_tree(
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_read)
):
    """Main categories with their sub and nested sub categories"""
    try:
        categories, warning = await list_visible(store, current_user, ResourceKind.CATEGORY, "categories")
        tree = build_tree(categories)
        return CategoryTreeResponse(
            categories=[CategoryWithChildrenResponse.model_validate(node) for node in tree],
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building category tree: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get categories"
        )


@router.get("/{category_id}", response_model=CategoryWithChildrenResponse)
async def get_category(
    category_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_read)
):
    try:
        category = await store.get("categories", category_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.CATEGORY, category))

        children, _warning = await list_visible(
            store, current_user, ResourceKind.CATEGORY, "categories",
            {"parent_id": category_id}, order_by="name", descending=False
        )
        return safe_model_validate(CategoryWithChildrenResponse, {**category, "children": children})

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get category"
        )


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_write)
):
    """
    Admin categories are global and approved immediately;
    vendor categories stay private and pending until an admin approves them
    """
    try:
        await validate_parent(store, current_user, category_data.parent_id)

        administrative = is_administrative(current_user)
        record = {
            **category_data.model_dump(),
            "food_type": category_data.food_type.value,
            "owner_id": owner_id_for(current_user),
            "is_global": administrative,
            "approval_state": "approved" if administrative else "pending",
            "is_active": True,
        }
        enforce(current_user, Action.CREATE, Resource(ResourceKind.CATEGORY, record))

        category_id = await store.insert("categories", record)
        logger.info(f"Category {category_id} created by {current_user.id}")
        return safe_model_validate(CategoryResponse, await store.get("categories", category_id))

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category"
        )


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_write)
):
    try:
        category = await store.get("categories", category_id)
        enforce(current_user, Action.UPDATE, Resource(ResourceKind.CATEGORY, category))

        patch = category_data.model_dump(exclude_unset=True)
        if "food_type" in patch and patch["food_type"] is not None:
            patch["food_type"] = category_data.food_type.value
        if patch:
            await store.update("categories", category_id, patch)
            logger.info(f"Category {category_id} updated by {current_user.id}")

        return safe_model_validate(CategoryResponse, {**category, **patch})

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update category"
        )


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_write)
):
    try:
        category = await store.get("categories", category_id)
        enforce(current_user, Action.DELETE, Resource(ResourceKind.CATEGORY, category))

        if await store.find_one("categories", {"parent_id": category_id}):
            raise ValidationFailed("Cannot delete a category that has subcategories. Delete them first.")
        if await store.find_one("products", {"category_id": category_id}):
            raise ValidationFailed("Cannot delete a category that still has products")

        await store.delete("categories", category_id)
        logger.info(f"Category {category_id} deleted by {current_user.id}")
        return {"message": "Category deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category"
        )


@router.post("/{category_id}/approve", response_model=CategoryResponse)
async def approve_category(
    category_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_category_approve)
):
    """Admin only: approve a vendor-submitted category"""
    try:
        category = await store.get("categories", category_id)
        enforce(current_user, Action.APPROVE, Resource(ResourceKind.CATEGORY, category))

        if category.get("approval_state") == "approved":
            return safe_model_validate(CategoryResponse, category)

        await store.update("categories", category_id, {"approval_state": "approved"})
        logger.info(f"Category {category_id} approved by {current_user.id}")
        return safe_model_validate(CategoryResponse, {**category, "approval_state": "approved"})

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error approving category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to approve category"
        )


@router.post("/{category_id}/image", response_model=ImageUploadResponse)
async def upload_category_image(
    category_id: str,
    file: UploadFile = File(..., description="Category image (JPEG, PNG, GIF, or WebP, max 5MB)"),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    blob_store: BlobStore = Depends(get_blob_store),
    _: bool = Depends(require_category_write)
):
    try:
        category = await store.get("categories", category_id)
        enforce(current_user, Action.UPDATE, Resource(ResourceKind.CATEGORY, category))

        image_url = await upload_image(blob_store, "categories", category.get("owner_id") or ADMIN_OWNER, file)
        await store.update("categories", category_id, {"image_url": image_url})

        return ImageUploadResponse(
            image_url=image_url,
            message="Category image uploaded successfully"
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading category image: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload category image"
        )
