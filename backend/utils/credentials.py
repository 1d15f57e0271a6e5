from supabase import Client, AuthError
from config import get_supabase_client, get_supabase_admin_client, ENVIRONMENT
from policy.errors import AlreadyExists, InvalidCredential, InvalidEmail, StoreError, TooManyAttempts, WeakSecret
import logging

logger = logging.getLogger(__name__)

RATE_LIMIT_CODES = {"over_request_rate_limit", "over_email_send_rate_limit", "too_many_requests"}
ALREADY_EXISTS_CODES = {"email_exists", "user_already_exists", "phone_exists"}
WEAK_SECRET_CODES = {"weak_password"}
INVALID_EMAIL_CODES = {"email_address_invalid", "validation_failed", "email_address_not_authorized"}
INVALID_CREDENTIAL_CODES = {"invalid_credentials", "email_not_confirmed", "user_not_found", "user_banned"}


def classify_auth_error(error: Exception):
    """Translate a Supabase Auth error into the policy error taxonomy"""
    code = getattr(error, "code", None)
    status_code = getattr(error, "status", None)
    message = str(getattr(error, "message", None) or error).lower()

    if code in RATE_LIMIT_CODES or status_code == 429:
        return TooManyAttempts()
    if code in ALREADY_EXISTS_CODES or "already been registered" in message or "already registered" in message:
        return AlreadyExists("An account with this email already exists")
    if code in WEAK_SECRET_CODES or type(error).__name__ == "AuthWeakPasswordError" or "password should be" in message:
        return WeakSecret("Password is too weak. Please register again with a stronger password.")
    if code in INVALID_EMAIL_CODES or "invalid email" in message or "unable to validate email" in message:
        return InvalidEmail("Invalid email format. Please check the email address.")
    if code in INVALID_CREDENTIAL_CODES or status_code in (400, 401):
        return InvalidCredential()
    return StoreError("Authentication service is unavailable. Please retry.")


class CredentialProvider:
    """Externally managed email/password credentials"""

    async def verify_credential(self, email: str, secret: str) -> str:
        raise NotImplementedError

    async def create_credential(self, email: str, secret: str, metadata: dict = None) -> str:
        raise NotImplementedError

    async def delete_credential(self, provider_id: str) -> None:
        raise NotImplementedError

    async def send_password_reset(self, email: str) -> None:
        raise NotImplementedError


class SupabaseCredentialProvider(CredentialProvider):
    """Credentials stored in Supabase Auth"""

    def __init__(self):
        self._supabase = None
        self._admin_client = None

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase_client()
        return self._supabase

    @property
    def admin_client(self) -> Client:
        if self._admin_client is None:
            self._admin_client = get_supabase_admin_client()
        return self._admin_client

    async def verify_credential(self, email: str, secret: str) -> str:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": secret
            })
        except AuthError as e:
            logger.warning(f"Credential verification failed for {email}: {getattr(e, 'code', None) or type(e).__name__}")
            raise classify_auth_error(e) from e

        if auth_response.user is None:
            raise InvalidCredential()
        return str(auth_response.user.id)

    async def create_credential(self, email: str, secret: str, metadata: dict = None) -> str:
        try:
            response = self.admin_client.auth.admin.create_user({
                "email": email,
                "password": secret,
                "email_confirm": True,
                "user_metadata": metadata or {}
            })
        except AuthError as e:
            logger.warning(f"Credential provisioning failed for {email}: {getattr(e, 'code', None) or type(e).__name__}")
            raise classify_auth_error(e) from e

        if response.user is None:
            raise StoreError("Authentication service did not return the new account")
        logger.info(f"Provisioned credential for {email}")
        return str(response.user.id)

    async def delete_credential(self, provider_id: str) -> None:
        try:
            self.admin_client.auth.admin.delete_user(provider_id)
        except AuthError as e:
            logger.error(f"Failed to delete credential {provider_id}: {str(e)}")
            raise classify_auth_error(e) from e

    async def send_password_reset(self, email: str) -> None:
        if ENVIRONMENT == "prod":
            redirect_url = "https://admin.foodhub.app/reset-password"
        else:
            redirect_url = "http://localhost:3000/reset-password"

        self.supabase.auth.reset_password_email(
            email,
            options={"redirect_to": redirect_url}
        )


supabase_credentials = SupabaseCredentialProvider()
