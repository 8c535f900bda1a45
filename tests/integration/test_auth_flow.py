"""
Integration tests for authentication flow
"""
import uuid
from unittest.mock import MagicMock, patch

from fastapi import status

from storefront.database.models import Profile, Tenant, User, UserToken
from storefront.database.models.user_token import TokenType


def latest_code(db_session, email, token_type):
    user = db_session.query(User).filter(User.email == email).one()
    token = (
        db_session.query(UserToken)
        .filter(UserToken.user_id == user.id, UserToken.token_type == token_type.value)
        .order_by(UserToken.dt_created.desc())
        .first()
    )
    return token.code


class TestRegistration:
    """Test user registration"""

    def test_register_user(self, client, test_user_data, no_outbound_sync):
        """Test user registration"""
        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user"]["email"] == test_user_data["email"]
        assert data["user"]["username"] == "shopper"
        assert data["user"]["profile"]["access_level"] == "user"
        assert data["user"]["profile"]["confirm_email"] is False
        assert data["user"]["tenant"]["tenant_type"] == "storefront"
        assert data["token"]
        assert isinstance(data["expires_in"], int)
        assert "password" not in data["user"]

    def test_register_with_profile(self, client, test_user_data):
        test_user_data["profile"] = {"document": "123.456.789-09", "birth_date": "1990-05-17"}

        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_201_CREATED
        profile = response.json()["user"]["profile"]
        assert profile["document"] == "123.456.789-09"
        assert profile["birth_date"] == "1990-05-17"

    def test_register_joins_existing_tenant(self, client, test_tenant, test_user_data):
        test_user_data["email"] = "teammate@example.com"
        test_user_data["tenant_id"] = str(test_tenant.id)

        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["tenant"]["id"] == str(test_tenant.id)

    def test_register_unknown_tenant(self, client, test_user_data):
        test_user_data["tenant_id"] = str(uuid.uuid4())

        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_register_duplicate_email(self, client, test_user, test_user_data):
        """Test registration with duplicate email"""
        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already registered" in response.json()["message"].lower()

    def test_register_weak_password(self, client, test_user_data):
        test_user_data["password"] = "letters"

        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_syncs_user(self, client, test_orchestrator, test_user_data, no_outbound_sync):
        client.post("/api/v1/auth/register/", json=test_user_data)

        assert no_outbound_sync.call_count == 1
        assert no_outbound_sync.call_args.args[0] == "https://crm.example.com/v1/event-sync/"

    def test_register_succeeds_when_sync_fails(self, client, test_orchestrator, test_user_data,
                                               no_outbound_sync):
        no_outbound_sync.return_value.status_code = 503

        response = client.post("/api/v1/auth/register/", json=test_user_data)

        assert response.status_code == status.HTTP_201_CREATED


class TestLogin:
    """Test email and password login"""

    def test_login_success(self, client, test_user, test_user_data):
        """Test successful login"""
        response = client.post(
            "/api/v1/auth/login/",
            json={"email": test_user_data["email"], "password": test_user_data["password"]},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token"]
        assert data["user"]["tenant"]["id"] == str(test_user[1].id)

    def test_login_wrong_password(self, client, test_user, test_user_data):
        """Test login with wrong password"""
        response = client.post(
            "/api/v1/auth/login/",
            json={"email": test_user_data["email"], "password": "WrongPassword123"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Unauthorized"

    def test_login_nonexistent_user(self, client):
        response = client.post(
            "/api/v1/auth/login/",
            json={"email": "nobody@example.com", "password": "Password123"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_deleted_user(self, client, test_user, test_user_data, auth_headers):
        client.delete("/api/v1/users/", headers=auth_headers)

        response = client.post(
            "/api/v1/auth/login/",
            json={"email": test_user_data["email"], "password": test_user_data["password"]},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestEmailConfirmation:

    def test_confirm_email(self, client, db_session, test_user_data):
        client.post("/api/v1/auth/register/", json=test_user_data)
        code = latest_code(db_session, test_user_data["email"], TokenType.CONFIRM_EMAIL)

        response = client.get(f"/api/v1/auth/confirm-email/{code}/")

        assert response.status_code == status.HTTP_200_OK
        user = db_session.query(User).filter(User.email == test_user_data["email"]).one()
        assert user.profile.confirm_email is True

    def test_code_is_single_use(self, client, db_session, test_user_data):
        client.post("/api/v1/auth/register/", json=test_user_data)
        code = latest_code(db_session, test_user_data["email"], TokenType.CONFIRM_EMAIL)

        client.get(f"/api/v1/auth/confirm-email/{code}/")
        response = client.get(f"/api/v1/auth/confirm-email/{code}/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_code(self, client):
        response = client.get("/api/v1/auth/confirm-email/not-a-code/")
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestPasswordReset:

    def test_reset_flow(self, client, db_session, test_user, test_user_data):
        response = client.post("/api/v1/auth/forgot-password/", json={"email": test_user_data["email"]})
        assert response.status_code == status.HTTP_200_OK

        code = latest_code(db_session, test_user_data["email"], TokenType.RESET_PASSWORD)
        response = client.post(
            "/api/v1/auth/change-password/",
            json={"code": code, "password": "NewPassword456"},
        )
        assert response.status_code == status.HTTP_200_OK

        response = client.post(
            "/api/v1/auth/login/",
            json={"email": test_user_data["email"], "password": "NewPassword456"},
        )
        assert response.status_code == status.HTTP_200_OK

    def test_forgot_password_unknown_email(self, client):
        response = client.post("/api/v1/auth/forgot-password/", json={"email": "nobody@example.com"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_change_password_bad_code(self, client):
        response = client.post(
            "/api/v1/auth/change-password/",
            json={"code": "nope", "password": "NewPassword456"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestKeycloakLogin:
    """Test identity provider login"""

    def introspection(self, payload, status_code=200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload
        return patch("storefront.auth.identity_provider.requests.post", return_value=response)

    def test_provisions_new_user(self, client, db_session):
        payload = {
            "active": True,
            "sub": "kc-1",
            "email": "kc.user@example.com",
            "email_verified": True,
            "given_name": "Kim",
            "family_name": "Costa",
            "resource_access": {"storefront": {"roles": ["admin"]}},
        }
        with self.introspection(payload):
            response = client.post("/api/v1/auth/login-keycloak/", json={"provider_token": "kc-token"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["profile"]["access_level"] == "admin"
        assert body["data"]["user"]["profile"]["confirm_email"] is True

        user = db_session.query(User).filter(User.email == "kc.user@example.com").one()
        assert user.password == ""
        assert db_session.query(Tenant).filter(Tenant.user_id == user.id).count() == 1

    def test_existing_user_keeps_tenant(self, client, test_user, test_user_data):
        payload = {"active": True, "sub": "kc-2", "email": test_user_data["email"]}
        with self.introspection(payload):
            response = client.post("/api/v1/auth/login-keycloak/", json={"provider_token": "kc-token"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["user"]["tenant"]["id"] == str(test_user[1].id)

    def test_inactive_token(self, client):
        with self.introspection({"active": False}):
            response = client.post("/api/v1/auth/login-keycloak/", json={"provider_token": "old"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_provider_user_cannot_use_password_login(self, client, db_session):
        payload = {"active": True, "sub": "kc-3", "email": "kc3@example.com"}
        with self.introspection(payload):
            client.post("/api/v1/auth/login-keycloak/", json={"provider_token": "kc-token"})

        response = client.post(
            "/api/v1/auth/login/",
            json={"email": "kc3@example.com", "password": "Password123"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
