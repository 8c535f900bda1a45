"""
JWT token management for authentication.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import uuid

from jose import JWTError, jwt

from storefront.utils.config import get_settings
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class JWTManager:
    """
    Manages JWT access token creation and verification.

    Tokens are signed with a shared secret (HS256) and carry the user id
    (``sub``), tenant and access level used by the auth middleware.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        expires_in: int = 86400,
    ):
        """
        Initialize JWT manager.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: Signing algorithm
            expires_in: Access token TTL in seconds
        """
        if not secret_key:
            raise ValueError("JWT_SECRET is required for JWT")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_in = timedelta(seconds=expires_in)

        logger.info(f"Initialized JWT manager (algorithm={algorithm}, ttl={expires_in}s)")

    def create_access_token(
        self,
        user_id: str,
        tenant_id: str,
        access_level: str,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Create access token for an authenticated user.

        Args:
            user_id: User UUID
            tenant_id: Tenant UUID the session is scoped to
            access_level: Profile access level (user, admin, super_admin)
            additional_claims: Optional additional claims to include

        Returns:
            JWT access token string
        """
        now = datetime.now(timezone.utc)
        expires = now + self.expires_in

        payload = {
            "sub": str(user_id),
            "tenant_id": str(tenant_id),
            "access_level": access_level,
            "type": "access",
            "iat": now,
            "exp": expires,
            "jti": str(uuid.uuid4()),
        }

        if additional_claims:
            payload.update(additional_claims)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"Created access token for user {user_id} (expires in {self.expires_in})")

        return token

    def verify_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token string
            token_type: Expected token type

        Returns:
            Decoded token payload

        Raises:
            JWTError: If token is invalid, expired or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )

            if payload.get("type") != token_type:
                raise JWTError(f"Invalid token type: expected {token_type}, got {payload.get('type')}")

            for claim in ("sub", "tenant_id", "access_level"):
                if not payload.get(claim):
                    raise JWTError(f"Missing claim: {claim}")

            return payload

        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise

    @staticmethod
    def seconds_until_expiry(claims: Dict[str, Any]) -> int:
        """Remaining lifetime of a decoded token in seconds (never negative)."""
        now = calendar.timegm(datetime.now(timezone.utc).utctimetuple())
        return max(int(claims.get("exp", 0)) - now, 0)


_jwt_manager: Optional[JWTManager] = None


def get_jwt_manager() -> JWTManager:
    """Get or create the global JWT manager from settings."""
    global _jwt_manager
    if _jwt_manager is None:
        settings = get_settings()
        _jwt_manager = JWTManager(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_in=settings.jwt_expires_in,
        )
    return _jwt_manager


def create_access_token(user_id: str, tenant_id: str, access_level: str) -> str:
    """Convenience function to create access token."""
    return get_jwt_manager().create_access_token(user_id, tenant_id, access_level)


def verify_token(token: str) -> Dict[str, Any]:
    """Convenience function to verify an access token."""
    return get_jwt_manager().verify_token(token)
