from fastapi import HTTPException, status
from config import JWT_SECRET_KEY, JWT_ALGORITHM, JWT_ACCESS_TOKEN_EXPIRE_MINUTES
from policy.principal import Principal, Role
from datetime import datetime, timedelta, timezone
import jwt
import logging

logger = logging.getLogger(__name__)

class AuthHelpers:
    """Session tokens carrying the resolved principal"""

    def __init__(self, secret_key: str = JWT_SECRET_KEY, expire_minutes: int = JWT_ACCESS_TOKEN_EXPIRE_MINUTES):
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes

    def create_access_token(self, principal: Principal) -> str:
        if not self.secret_key:
            logger.error("JWT_SECRET_KEY is not configured")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Token signing is not configured"
            )

        now = datetime.now(timezone.utc)
        payload = {
            "sub": principal.id,
            "role": principal.role.value,
            "email": principal.email,
            "name": principal.name,
            "vendor_record_id": principal.vendor_record_id,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> Principal:
        """
        Verify a session token locally and rebuild the principal it was issued for
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_signature": True,
                    "verify_aud": False
                }
            )
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired"
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )

        user_id = payload.get("sub")
        role = payload.get("role")
        if not user_id or role not in {r.value for r in Role}:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID or role"
            )

        return Principal(
            id=user_id,
            role=Role(role),
            email=payload.get("email"),
            name=payload.get("name"),
            vendor_record_id=payload.get("vendor_record_id"),
        )

auth_helpers = AuthHelpers()
