from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from dependencies.rbac import require_slider_write
from dependencies.services import get_store, get_blob_store
from policy.errors import PolicyError, StoreError, ValidationFailed
from policy.principal import ADMIN_OWNER, Principal
from routers.auth.auth import get_current_user
from routers.categories.schemas import ImageUploadResponse
from routers.sliders.schemas import (
    SliderCreate, SliderUpdate, SliderResponse, SliderListResponse, SliderKind, SliderStatus
)
from store import READ_DEGRADED_WARNING, DocumentStore
from utils.response_helpers import safe_model_validate, safe_model_validate_list, to_http_exception
from utils.storage import BlobStore, upload_image
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sliders", tags=["Sliders"])


async def _validate_placement(store: DocumentStore, slider: Dict[str, Any]) -> None:
    """Category sliders must point at an existing category"""
    if slider.get("kind") == SliderKind.CATEGORY.value:
        if not slider.get("category_id"):
            raise ValidationFailed("Category sliders need a category")
        await store.get("categories", slider["category_id"])


async def _list_sliders(store: DocumentStore, filters: Dict[str, Any]) -> SliderListResponse:
    try:
        sliders = await store.find_many("sliders", filters, order_by="position", descending=False)
    except StoreError as e:
        logger.warning(f"Listing sliders degraded: {e.message}")
        return SliderListResponse(sliders=[], total=0, warning=READ_DEGRADED_WARNING)
    return SliderListResponse(sliders=safe_model_validate_list(SliderResponse, sliders), total=len(sliders))


@router.get("/active", response_model=SliderListResponse)
async def list_active_sliders(
    kind: Optional[SliderKind] = Query(None),
    category_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store)
):
    """Public: active sliders in display order"""
    try:
        filters = {"status": SliderStatus.ACTIVE.value}
        if kind:
            filters["kind"] = kind.value
        if category_id:
            filters["category_id"] = category_id
        return await _list_sliders(store, filters)

    except Exception as e:
        logger.error(f"Error listing active sliders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get sliders"
        )


@router.get("/", response_model=SliderListResponse)
async def list_sliders(
    kind: Optional[SliderKind] = Query(None),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_slider_write)
):
    """Admin only: every slider including inactive ones"""
    try:
        return await _list_sliders(store, {"kind": kind.value} if kind else {})

    except Exception as e:
        logger.error(f"Error listing sliders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get sliders"
        )


@router.post("/", response_model=SliderResponse, status_code=status.HTTP_201_CREATED)
async def create_slider(
    slider_data: SliderCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_slider_write)
):
    try:
        record = {
            **slider_data.model_dump(),
            "kind": slider_data.kind.value,
            "status": slider_data.status.value,
        }
        await _validate_placement(store, record)

        slider_id = await store.insert("sliders", record)
        logger.info(f"Slider {slider_id} created by {current_user.id}")
        return safe_model_validate(SliderResponse, await store.get("sliders", slider_id))

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating slider: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create slider"
        )


@router.put("/{slider_id}", response_model=SliderResponse)
async def update_slider(
    slider_id: str,
    slider_data: SliderUpdate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_slider_write)
):
    try:
        slider = await store.get("sliders", slider_id)

        patch = slider_data.model_dump(exclude_unset=True)
        if patch.get("status") is not None:
            patch["status"] = slider_data.status.value
        merged = {**slider, **patch}
        if "category_id" in patch:
            await _validate_placement(store, merged)

        if patch:
            await store.update("sliders", slider_id, patch)
            logger.info(f"Slider {slider_id} updated by {current_user.id}")

        return safe_model_validate(SliderResponse, merged)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating slider: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update slider"
        )


@router.patch("/{slider_id}/status", response_model=SliderResponse)
async def toggle_slider_status(
    slider_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_slider_write)
):
    """Switch a slider between active and inactive"""
    try:
        slider = await store.get("sliders", slider_id)
        new_status = (
            SliderStatus.INACTIVE.value if slider["status"] == SliderStatus.ACTIVE.value
            else SliderStatus.ACTIVE.value
        )
        await store.update("sliders", slider_id, {"status": new_status})
        logger.info(f"Slider {slider_id} set {new_status} by {current_user.id}")
        return safe_model_validate(SliderResponse, {**slider, "status": new_status})

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling slider: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update slider status"
        )


@router.delete("/{slider_id}")
async def delete_slider(
    slider_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_slider_write)
):
    try:
        await store.delete("sliders", slider_id)
        logger.info(f"Slider {slider_id} deleted by {current_user.id}")
        return {"message": "Slider deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting slider: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete slider"
        )


@router.post("/{slider_id}/image", response_model=ImageUploadResponse)
async def upload_slider_image(
    slider_id: str,
    file: UploadFile = File(..., description="Slider image (JPEG, PNG, GIF, or WebP, max 5MB)"),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    blob_store: BlobStore = Depends(get_blob_store),
    _: bool = Depends(require_slider_write)
):
    try:
        await store.get("sliders", slider_id)

        image_url = await upload_image(blob_store, "sliders", ADMIN_OWNER, file)
        await store.update("sliders", slider_id, {"image_url": image_url})

        return ImageUploadResponse(
            image_url=image_url,
            message="Slider image uploaded successfully"
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading slider image: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload slider image"
        )
