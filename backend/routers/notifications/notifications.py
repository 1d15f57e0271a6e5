from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import require_notification_read, require_notification_write
from dependencies.services import get_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError, ValidationFailed
from policy.principal import Principal, is_administrative
from routers.auth.auth import get_current_user
from routers.notifications.schemas import (
    NotificationCreate, NotificationResponse, NotificationListResponse, TargetAudience
)
from store import DocumentStore, list_visible
from utils.response_helpers import safe_model_validate, to_http_exception
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def is_expired(notification: Dict[str, Any], now: datetime) -> bool:
    expires_at = notification.get("expires_at")
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


def notification_to_response(notification: Dict[str, Any], principal: Principal) -> NotificationResponse:
    read_by = notification.get("read_by") or []
    return safe_model_validate(NotificationResponse, {
        **{k: v for k, v in notification.items() if k != "read_by"},
        "read_count": len(read_by),
        "is_read": principal.id in read_by,
    })


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    target_audience: Optional[TargetAudience] = Query(None, description="Admin only"),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_notification_read)
):
    """
    Admins see every notification. Vendors and customers see active, unexpired
    notifications addressed to them.
    """
    try:
        filters = {}
        if target_audience and is_administrative(current_user):
            filters["target_audience"] = target_audience.value

        notifications, warning = await list_visible(
            store, current_user, ResourceKind.NOTIFICATION, "notifications", filters
        )
        if not is_administrative(current_user):
            now = datetime.now(timezone.utc)
            notifications = [n for n in notifications if not is_expired(n, now)]

        responses = [notification_to_response(n, current_user) for n in notifications]
        return NotificationListResponse(
            notifications=responses,
            total=len(responses),
            unread_count=sum(1 for n in responses if not n.is_read),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing notifications: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get notifications"
        )


@router.post("/", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    notification_data: NotificationCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_notification_write)
):
    """Admin only: send a notification to customers or vendors"""
    try:
        if notification_data.expires_at is not None and is_expired(
            {"expires_at": notification_data.expires_at}, datetime.now(timezone.utc)
        ):
            raise ValidationFailed("Expiry date must be in the future")
        if notification_data.vendor_ids and notification_data.target_audience != TargetAudience.VENDORS:
            raise ValidationFailed("Specific vendors can only be targeted with the vendors audience")

        record = {
            **notification_data.model_dump(),
            "type": notification_data.type.value,
            "target_audience": notification_data.target_audience.value,
            "is_active": True,
            "created_by": current_user.id,
            "created_by_role": current_user.role.value,
            "read_by": [],
        }
        enforce(current_user, Action.CREATE, Resource(ResourceKind.NOTIFICATION, record))

        notification_id = await store.insert("notifications", record)
        logger.info(f"Notification {notification_id} sent to {record['target_audience']} by {current_user.id}")
        return notification_to_response(await store.get("notifications", notification_id), current_user)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating notification: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create notification"
        )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_notification_read)
):
    try:
        notification = await store.get("notifications", notification_id)
        enforce(current_user, Action.MARK_READ, Resource(ResourceKind.NOTIFICATION, notification))

        read_by = list(notification.get("read_by") or [])
        if current_user.id not in read_by:
            read_by.append(current_user.id)
            await store.update("notifications", notification_id, {"read_by": read_by})

        return notification_to_response({**notification, "read_by": read_by}, current_user)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error marking notification read: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to mark notification as read"
        )


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_notification_write)
):
    try:
        notification = await store.get("notifications", notification_id)
        enforce(current_user, Action.DELETE, Resource(ResourceKind.NOTIFICATION, notification))

        await store.delete("notifications", notification_id)
        logger.info(f"Notification {notification_id} deleted by {current_user.id}")
        return {"message": "Notification deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting notification: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete notification"
        )
