"""
JWT authentication middleware and request dependencies.

Every path under /api/v1 is private unless listed in PUBLIC_PATHS. The
middleware decodes the bearer token once and stores the claims on
request.state for the route dependencies below.
"""

import re
from typing import Any, Dict, Optional

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.auth import get_jwt_manager
from storefront.monitoring import set_user_context
from storefront.utils.exceptions import AuthenticationError, PermissionDeniedError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

PUBLIC_PATHS = [
    re.compile(r"^/api/v1/health(/.*)?$"),
    re.compile(r"^/api/v1/auth/(register|login|login-keycloak|forgot-password|change-password)/?$"),
    re.compile(r"^/api/v1/auth/confirm-email/[^/]+/?$"),
    re.compile(r"^/api/v1/orchestrator/authorize/[^/]+/?$"),
]

TOKEN_SCHEMES = ("Bearer", "Token")


def is_public_path(path: str) -> bool:
    if not path.startswith(API_PREFIX):
        return True
    return any(pattern.match(path) for pattern in PUBLIC_PATHS)


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value.

    "Bearer <t>" and "Token <t>" are stripped; any other value is taken
    as the raw token.
    """
    if not authorization:
        return None

    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme in TOKEN_SCHEMES:
        value = rest.strip()

    return value or None


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "Unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware that authenticates private API requests.

    Sets ``request.state.claims`` and ``request.state.token``.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        token = extract_token(request.headers.get("Authorization"))
        if token is None:
            return _unauthorized("Token not provided")

        try:
            claims = get_jwt_manager().verify_token(token)
        except JWTError:
            return _unauthorized("Invalid token")

        request.state.claims = claims
        request.state.token = token
        set_user_context(user_id=claims.get("sub"), tenant_id=claims.get("tenant_id"))

        return await call_next(request)


def get_current_claims(request: Request) -> Dict[str, Any]:
    """
    Dependency returning the verified token claims.

    Raises:
        AuthenticationError: If the request was not authenticated
    """
    claims = getattr(request.state, "claims", None)
    if not claims:
        raise AuthenticationError("Token not provided")
    return claims


def get_current_token(request: Request) -> str:
    token = getattr(request.state, "token", None)
    if not token:
        raise AuthenticationError("Token not provided")
    return token


def require_access_level(*levels: str):
    """
    Dependency factory restricting a route to the given access levels.

    Usage:
        @router.get("/", dependencies=[Depends(require_access_level("admin"))])
    """
    def checker(claims: Dict[str, Any] = Depends(get_current_claims)) -> Dict[str, Any]:
        if claims.get("access_level") not in levels:
            logger.warning(
                f"User {claims.get('sub')} with level {claims.get('access_level')} "
                f"denied (requires {', '.join(levels)})"
            )
            raise PermissionDeniedError("Insufficient permissions")
        return claims

    return checker
