"""
Login: turn (email, secret) into a Principal.

Resolution order:
  1. configured main admin (no credential store call)
  2. credential store verification
  3. admins collection by email
  4. vendors by credential_ref, then by email; must be active
  5. nothing matched: NotFound
"""
from datetime import datetime, timezone
from typing import Optional
import hmac
import logging

from config import MAIN_ADMIN_EMAIL, MAIN_ADMIN_PASSWORD, MAIN_ADMIN_NAME
from .errors import InvalidCredential, NotFound, StoreError
from .lifecycle import ensure_vendor_active, login_refusal, pick_vendor
from .principal import MAIN_ADMIN_ID, Principal, Role

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class IdentityResolver:
    def __init__(
        self,
        store,
        credentials,
        main_admin_email: str = MAIN_ADMIN_EMAIL,
        main_admin_password: str = MAIN_ADMIN_PASSWORD,
        main_admin_name: str = MAIN_ADMIN_NAME,
    ):
        self.store = store
        self.credentials = credentials
        self.main_admin_email = normalize_email(main_admin_email)
        self.main_admin_password = main_admin_password or ""
        self.main_admin_name = main_admin_name

    def _is_main_admin(self, email: str, secret: str) -> bool:
        if not self.main_admin_email or not self.main_admin_password:
            return False
        return email == self.main_admin_email and hmac.compare_digest(
            secret.encode("utf-8"), self.main_admin_password.encode("utf-8")
        )

    async def _repair(self, collection: str, record_id: str, patch: dict) -> None:
        # Repairs are best effort; a failed write never blocks the login
        try:
            await self.store.update(collection, record_id, patch)
        except StoreError as e:
            logger.warning(f"Could not repair {collection}/{record_id} during login: {e.message}")

    async def resolve(self, email: str, secret: str) -> Principal:
        email = normalize_email(email)
        secret = secret or ""

        if self._is_main_admin(email, secret):
            logger.info("Main admin signed in")
            return Principal(id=MAIN_ADMIN_ID, role=Role.MAIN_ADMIN, email=email, name=self.main_admin_name)

        provider_id = await self.credentials.verify_credential(email, secret)

        admin = await self.store.find_one("admins", {"email": email})
        if admin is not None:
            patch = {"last_login_at": datetime.now(timezone.utc)}
            if admin.get("credential_ref") != provider_id:
                logger.info(f"Repairing credential link for admin {admin['id']}")
                patch["credential_ref"] = provider_id
            await self._repair("admins", admin["id"], patch)
            return Principal(id=admin["id"], role=Role.ADMIN, email=email, name=admin.get("name"))

        by_credential = await self.store.find_many("vendors", {"credential_ref": provider_id})
        by_email = await self.store.find_many("vendors", {"email": email})
        # A re-registration keeps the old record linked to the credential, so both sets are searched
        candidates = {v["id"]: v for v in by_credential + by_email}
        vendor = pick_vendor(list(candidates.values()))

        if vendor is not None:
            refusal = login_refusal(vendor)
            if refusal is not None:
                logger.warning(f"Vendor {vendor['id']} refused at login: {vendor['lifecycle_state']}")
                raise refusal
            if vendor.get("credential_ref") != provider_id:
                logger.info(f"Repairing credential link for vendor {vendor['id']}")
                await self._repair("vendors", vendor["id"], {"credential_ref": provider_id})
            return Principal(
                id=provider_id,
                role=Role.VENDOR,
                email=email,
                name=vendor.get("name"),
                vendor_record_id=vendor["id"],
            )

        logger.warning(f"Login for {email} matched no admin or vendor account")
        raise NotFound("No admin or vendor account is registered for this email")


async def ensure_session_valid(store, principal: Principal) -> None:
    """Re-check a session principal against the record it was issued for"""
    if principal.role == Role.VENDOR:
        await ensure_vendor_active(store, principal)
    elif principal.role == Role.ADMIN:
        if await store.find_one("admins", {"id": principal.id}) is None:
            raise InvalidCredential("Administrator account no longer exists.")
