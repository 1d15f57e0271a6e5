from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import require_feedback_read, require_feedback_write
from dependencies.services import get_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError
from policy.principal import Principal, is_administrative
from routers.auth.auth import get_current_user
from routers.feedback.schemas import FeedbackCreate, FeedbackResponse, FeedbackListResponse, FeedbackType
from store import DocumentStore, list_visible
from utils.response_helpers import safe_model_validate, safe_model_validate_list, to_http_exception
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.get("/", response_model=FeedbackListResponse)
async def list_feedback(
    user_type: Optional[str] = Query(None, description="Admin only: customer or vendor"),
    type_filter: Optional[FeedbackType] = Query(None, alias="type"),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_feedback_read)
):
    """Admins see all feedback; vendors see customer feedback addressed to them"""
    try:
        filters = {}
        if user_type and is_administrative(current_user):
            filters["user_type"] = user_type
        if type_filter:
            filters["type"] = type_filter.value

        feedback, warning = await list_visible(store, current_user, ResourceKind.FEEDBACK, "feedback", filters)

        ratings = [f["rating"] for f in feedback if f.get("rating")]
        average_rating = round(sum(ratings) / len(ratings), 1) if ratings else None

        return FeedbackListResponse(
            feedback=safe_model_validate_list(FeedbackResponse, feedback),
            total=len(feedback),
            average_rating=average_rating,
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing feedback: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get feedback"
        )


@router.get("/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(
    feedback_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_feedback_read)
):
    try:
        feedback = await store.get("feedback", feedback_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.FEEDBACK, feedback))
        return safe_model_validate(FeedbackResponse, feedback)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting feedback: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get feedback"
        )


@router.post("/", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_feedback(
    feedback_data: FeedbackCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_feedback_write)
):
    """Customers submit feedback, optionally about one vendor"""
    try:
        if feedback_data.vendor_id:
            await store.get("vendors", feedback_data.vendor_id)

        record = {
            **feedback_data.model_dump(),
            "type": feedback_data.type.value,
            "user_type": current_user.role.value,
            "author_id": current_user.id,
            "user_name": current_user.name,
        }
        enforce(current_user, Action.CREATE, Resource(ResourceKind.FEEDBACK, record))

        feedback_id = await store.insert("feedback", record)
        logger.info(f"Feedback {feedback_id} submitted by {current_user.id}")
        return safe_model_validate(FeedbackResponse, await store.get("feedback", feedback_id))

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating feedback: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit feedback"
        )
