from fastapi import APIRouter, Depends, HTTPException, status
from config import MIN_VENDOR_PASSWORD_LENGTH
from dependencies.rbac import require_admin_accounts, require_admin_accounts_write
from dependencies.services import get_store, get_credentials
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import AlreadyExists, PolicyError, ValidationFailed
from policy.principal import Principal
from routers.admin.schemas import AdminCreate, AdminResponse, AdminListResponse, AdminCreateResponse
from routers.auth.auth import get_current_user
from store import DocumentStore, list_visible
from utils.credentials import CredentialProvider
from utils.response_helpers import safe_model_validate, to_http_exception
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def admin_to_response(admin: Dict[str, Any]) -> AdminResponse:
    data = {k: v for k, v in admin.items() if k != "credential_ref"}
    data["has_credential"] = bool(admin.get("credential_ref"))
    return safe_model_validate(AdminResponse, data)


@router.get("/admins", response_model=AdminListResponse)
async def list_admins(
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_admin_accounts)
):
    """
    Main admin only: list administrator accounts
    """
    try:
        admins, warning = await list_visible(store, current_user, ResourceKind.ADMIN_ACCOUNT, "admins")
        return AdminListResponse(
            admins=[admin_to_response(a) for a in admins],
            total=len(admins),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"List admins failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve admins"
        )


@router.post("/admins", response_model=AdminCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    admin_data: AdminCreate,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    credentials: CredentialProvider = Depends(get_credentials),
    _: bool = Depends(require_admin_accounts_write)
):
    """
    Main admin only: create an administrator and provision their sign-in credential
    """
    try:
        record = {"email": admin_data.email, "name": admin_data.name}
        enforce(current_user, Action.CREATE, Resource(ResourceKind.ADMIN_ACCOUNT, record))

        if len(admin_data.password) < MIN_VENDOR_PASSWORD_LENGTH:
            raise ValidationFailed(f"Password must be at least {MIN_VENDOR_PASSWORD_LENGTH} characters")
        if await store.find_one("admins", {"email": admin_data.email}):
            raise AlreadyExists("An admin with this email already exists")

        warning = None
        try:
            record["credential_ref"] = await credentials.create_credential(
                admin_data.email, admin_data.password, {"role": "admin"}
            )
        except AlreadyExists:
            logger.warning(f"Credential for {admin_data.email} already exists; linking on first login")
            warning = "An account with this email already exists. The admin signs in with the existing password."

        admin_id = await store.insert("admins", record)
        logger.info(f"Admin {admin_id} created by {current_user.id}")

        return AdminCreateResponse(
            admin=admin_to_response(await store.get("admins", admin_id)),
            message="Admin created successfully",
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Create admin failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create admin"
        )


@router.delete("/admins/{admin_id}")
async def delete_admin(
    admin_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    credentials: CredentialProvider = Depends(get_credentials),
    _: bool = Depends(require_admin_accounts_write)
):
    """
    Main admin only: remove an administrator and their sign-in credential
    """
    try:
        admin = await store.get("admins", admin_id)
        enforce(current_user, Action.DELETE, Resource(ResourceKind.ADMIN_ACCOUNT, admin))

        await store.delete("admins", admin_id)
        if admin.get("credential_ref"):
            try:
                await credentials.delete_credential(admin["credential_ref"])
            except PolicyError as e:
                logger.warning(f"Admin {admin_id} removed but credential cleanup failed: {e.message}")

        logger.info(f"Admin {admin_id} deleted by {current_user.id}")
        return {"message": "Admin deleted successfully"}

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete admin failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete admin"
        )
