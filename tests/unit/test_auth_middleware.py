"""
Unit tests for token extraction and route visibility
"""
import pytest

from storefront.api.middleware.auth_context import extract_token, is_public_path


class TestExtractToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("Token abc.def.ghi", "abc.def.ghi"),
        ("abc.def.ghi", "abc.def.ghi"),
        ("  Bearer   abc  ", "abc"),
    ])
    def test_prefixes(self, header, expected):
        assert extract_token(header) == expected

    @pytest.mark.parametrize("header", [None, "", "Bearer ", "Bearer", "Token   ", "   "])
    def test_missing(self, header):
        assert extract_token(header) is None


class TestPublicPaths:

    @pytest.mark.parametrize("path", [
        "/",
        "/metrics",
        "/docs",
        "/api/v1/health/",
        "/api/v1/health/ready",
        "/api/v1/auth/register/",
        "/api/v1/auth/login/",
        "/api/v1/auth/login-keycloak/",
        "/api/v1/auth/confirm-email/abc-123/",
        "/api/v1/orchestrator/authorize/1b4e28ba-2fa1-11d2-883f-0016d3cca427/",
    ])
    def test_public(self, path):
        assert is_public_path(path) is True

    @pytest.mark.parametrize("path", [
        "/api/v1/users/me/",
        "/api/v1/products/",
        "/api/v1/carts/items/",
        "/api/v1/apps-orchestrator/",
    ])
    def test_private(self, path):
        assert is_public_path(path) is False
