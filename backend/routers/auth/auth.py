from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from dependencies.services import get_store, get_credentials, get_lifecycle, get_identity_resolver
from policy.errors import PolicyError
from policy.identity import IdentityResolver, ensure_session_valid
from policy.lifecycle import VendorLifecycle
from policy.principal import Principal
from routers.vendors.helpers import vendor_to_response
from routers.vendors.schemas import VendorRegister
from store import DocumentStore
from utils.credentials import CredentialProvider
from utils.notifications import notify_vendor_state
from utils.response_helpers import to_http_exception
from .schemas import (
    UserLogin,
    AuthResponse,
    PrincipalResponse,
    RegisterResponse,
    ForgotPasswordRequest
)
from .helpers import auth_helpers
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

security = HTTPBearer()

async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: DocumentStore = Depends(get_store)
) -> Principal:
    """Get current principal from the session token; vendors and admins are re-checked against their records"""
    principal = auth_helpers.verify_token(credentials.credentials)

    try:
        await ensure_session_valid(store, principal)
    except PolicyError as e:
        logger.warning(f"Session for {principal.id} refused: {e.message}")
        raise to_http_exception(e)

    request.state.current_user = principal
    return principal

def principal_to_response(principal: Principal) -> PrincipalResponse:
    return PrincipalResponse(
        id=principal.id,
        role=principal.role.value,
        email=principal.email,
        name=principal.name,
        vendor_record_id=principal.vendor_record_id
    )

@router.post("/login", response_model=AuthResponse)
async def login(
    user_data: UserLogin,
    resolver: IdentityResolver = Depends(get_identity_resolver)
):
    try:
        principal = await resolver.resolve(user_data.email, user_data.password)

        return AuthResponse(
            access_token=auth_helpers.create_access_token(principal),
            expires_in=auth_helpers.expire_minutes * 60,
            user=principal_to_response(principal)
        )

    except PolicyError as e:
        logger.warning(f"Login failed for {user_data.email}: {type(e).__name__}")
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_vendor(
    vendor_data: VendorRegister,
    background_tasks: BackgroundTasks,
    lifecycle: VendorLifecycle = Depends(get_lifecycle)
):
    """Vendor self-registration. The account stays pending until an admin approves it."""
    try:
        registration = vendor_data.model_dump(exclude={"password", "confirm_password"})
        result = await lifecycle.register(registration, vendor_data.password)

        notify_vendor_state(background_tasks, result.vendor)

        return RegisterResponse(
            vendor=vendor_to_response(result.vendor),
            message="Registration submitted. You can sign in once an admin approves your account.",
            warning=result.warning
        )

    except PolicyError as e:
        logger.warning(f"Vendor registration refused for {vendor_data.email}: {e.message}")
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

@router.post("/forgot-password")
async def forgot_password(
    request_data: ForgotPasswordRequest,
    credentials: CredentialProvider = Depends(get_credentials)
):
    generic = {"message": "If an account with that email exists, a password reset link has been sent."}
    try:
        await credentials.send_password_reset(request_data.email)
    except Exception as e:
        logger.error(f"Password reset email failed: {str(e)}")
    return generic

@router.get("/me", response_model=PrincipalResponse)
async def get_me(
    current_user: Principal = Depends(get_current_user)
):
    return principal_to_response(current_user)
