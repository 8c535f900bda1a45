"""
Keycloak (OpenID Connect) token introspection.

Users holding a token issued by the identity provider exchange it for a
local session. The token is validated by the provider's introspection
endpoint; nothing is verified locally.
"""

from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel

from storefront.database.models import AccessLevel
from storefront.utils.config import Settings, get_settings
from storefront.utils.exceptions import AuthenticationError, ExternalServiceError, ValidationError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class IntrospectionResult(BaseModel):
    """Subset of the RFC 7662 introspection response we rely on."""
    active: bool
    sub: Optional[str] = None
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    preferred_username: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    realm_access: Optional[Dict[str, Any]] = None
    resource_access: Optional[Dict[str, Any]] = None

    class Config:
        extra = "ignore"

    def realm_roles(self) -> List[str]:
        return list((self.realm_access or {}).get("roles") or [])

    def client_roles(self, client_id: str) -> List[str]:
        client = (self.resource_access or {}).get(client_id) or {}
        return list(client.get("roles") or [])


def map_roles_to_access_level(info: IntrospectionResult, client_id: str) -> str:
    """
    Map provider roles onto a local access level.

    Realm roles win over client roles, and super_admin wins over admin.
    Anything else is a plain user.
    """
    for roles in (info.realm_roles(), info.client_roles(client_id)):
        if AccessLevel.SUPER_ADMIN.value in roles:
            return AccessLevel.SUPER_ADMIN.value
        if AccessLevel.ADMIN.value in roles:
            return AccessLevel.ADMIN.value
    return AccessLevel.USER.value


class KeycloakClient:
    """Thin client for the Keycloak introspection endpoint."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def client_id(self) -> str:
        return self.settings.keycloak_client_id

    def introspect(self, provider_token: str) -> IntrospectionResult:
        """
        Validate a provider token.

        Args:
            provider_token: Access token issued by Keycloak

        Returns:
            IntrospectionResult for an active token that carries sub and email

        Raises:
            AuthenticationError: Token rejected or inactive
            ValidationError: Token lacks email or subject
            ExternalServiceError: Provider unreachable or returned garbage
        """
        url = self.settings.keycloak_introspect_url
        form = {
            "token": provider_token,
            "client_id": self.settings.keycloak_client_id,
            "client_secret": self.settings.keycloak_client_secret,
        }

        try:
            response = requests.post(url, data=form, timeout=self.settings.keycloak_timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Keycloak introspection request failed: {e}")
            raise ExternalServiceError("Could not reach identity provider", service="keycloak")

        if not 200 <= response.status_code < 300:
            logger.error(f"Keycloak returned HTTP {response.status_code}")
            raise AuthenticationError("Invalid token")

        try:
            info = IntrospectionResult.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Unexpected Keycloak introspection payload: {e}")
            raise ExternalServiceError("Invalid identity provider response", service="keycloak",
                                       upstream_status=response.status_code)

        if not info.active:
            raise AuthenticationError("Invalid or expired token")
        if not info.email:
            raise ValidationError("Email not found in token")
        if not info.sub:
            raise ValidationError("Subject not found in token")

        return info
