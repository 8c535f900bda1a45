"""
Unit tests for Keycloak token introspection
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from storefront.auth.identity_provider import (
    IntrospectionResult,
    KeycloakClient,
    map_roles_to_access_level,
)
from storefront.utils.config import get_settings
from storefront.utils.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    ValidationError,
)

ACTIVE_TOKEN = {
    "active": True,
    "sub": "kc-123",
    "email": "kc.user@example.com",
    "email_verified": True,
    "given_name": "Kim",
    "family_name": "Costa",
    "realm_access": {"roles": ["offline_access"]},
    "resource_access": {"storefront": {"roles": ["admin"]}},
}


def response(status_code=200, payload=None):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload if payload is not None else {}
    return mock


class TestRoleMapping:

    def test_client_role(self):
        info = IntrospectionResult(**ACTIVE_TOKEN)
        assert map_roles_to_access_level(info, "storefront") == "admin"

    def test_realm_super_admin_wins(self):
        info = IntrospectionResult(**{**ACTIVE_TOKEN, "realm_access": {"roles": ["super_admin"]}})
        assert map_roles_to_access_level(info, "storefront") == "super_admin"

    def test_other_client_roles_ignored(self):
        info = IntrospectionResult(**ACTIVE_TOKEN)
        assert map_roles_to_access_level(info, "another-client") == "user"


class TestIntrospection:

    def setup_method(self):
        self.client = KeycloakClient(get_settings())

    def test_active_token(self):
        with patch("storefront.auth.identity_provider.requests.post",
                   return_value=response(payload=ACTIVE_TOKEN)) as mock_post:
            info = self.client.introspect("provider-token")

        assert info.email == "kc.user@example.com"
        assert mock_post.call_args.args[0].endswith("/protocol/openid-connect/token/introspect")
        assert mock_post.call_args.kwargs["data"]["token"] == "provider-token"

    def test_inactive_token(self):
        with patch("storefront.auth.identity_provider.requests.post",
                   return_value=response(payload={"active": False})):
            with pytest.raises(AuthenticationError):
                self.client.introspect("expired")

    def test_rejected_by_provider(self):
        with patch("storefront.auth.identity_provider.requests.post",
                   return_value=response(status_code=401)):
            with pytest.raises(AuthenticationError):
                self.client.introspect("bad")

    def test_missing_email(self):
        payload = {k: v for k, v in ACTIVE_TOKEN.items() if k != "email"}
        with patch("storefront.auth.identity_provider.requests.post",
                   return_value=response(payload=payload)):
            with pytest.raises(ValidationError):
                self.client.introspect("no-email")

    def test_provider_unreachable(self):
        with patch("storefront.auth.identity_provider.requests.post",
                   side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(ExternalServiceError) as exc_info:
                self.client.introspect("token")

        assert exc_info.value.status_code == 502
