"""
Integration tests for the orchestrator registry
"""
import uuid
from unittest.mock import patch

from fastapi import status

from storefront.services import sync_producer

BASE = "/api/v1/apps-orchestrator"


class TestOrchestratorAdmin:
    """Test registry management (super_admin only)"""

    def test_plain_user_forbidden(self, client, auth_headers):
        response = client.get(f"{BASE}/", headers=auth_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_forbidden(self, client, admin_headers):
        response = client.get(f"{BASE}/", headers=admin_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_and_list(self, client, super_admin_headers):
        response = client.post(
            f"{BASE}/",
            headers=super_admin_headers,
            json={"app_name": "crm", "app_url": "https://crm.example.com"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Orchestrator created successfully"
        assert uuid.UUID(body["data"]["app_token"])

        response = client.get(f"{BASE}/", headers=super_admin_headers)
        data = response.json()["data"]
        assert data["count"] == 1
        assert data["results"][0]["app_name"] == "crm"

    def test_invalid_url(self, client, super_admin_headers):
        response = client.post(
            f"{BASE}/",
            headers=super_admin_headers,
            json={"app_name": "crm", "app_url": "not-a-url"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_update(self, client, super_admin_headers, test_orchestrator):
        response = client.patch(
            f"{BASE}/{test_orchestrator.id}/",
            headers=super_admin_headers,
            json={"app_url": "https://crm2.example.com"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["app_url"] == "https://crm2.example.com"
        assert response.json()["data"]["app_name"] == "crm"

    def test_delete(self, client, super_admin_headers, test_orchestrator):
        response = client.delete(f"{BASE}/{test_orchestrator.id}/", headers=super_admin_headers)
        assert response.status_code == status.HTTP_200_OK

        response = client.get(f"{BASE}/{test_orchestrator.id}/", headers=super_admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAuthorizeApp:
    """Test the public token check"""

    def test_known_token(self, client, test_orchestrator):
        response = client.get(f"/api/v1/orchestrator/authorize/{test_orchestrator.app_token}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"app_name": "crm", "status": "authorized"}

    def test_unknown_token(self, client):
        response = client.get(f"/api/v1/orchestrator/authorize/{uuid.uuid4()}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"app_name": "unknown", "status": "unauthorized"}

    def test_malformed_token(self, client):
        response = client.get("/api/v1/orchestrator/authorize/not-a-uuid/")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_deleted_orchestrator_unauthorized(self, client, db_session, test_orchestrator):
        test_orchestrator.soft_delete()
        db_session.commit()

        response = client.get(f"/api/v1/orchestrator/authorize/{test_orchestrator.app_token}/")

        assert response.json()["status"] == "unauthorized"


class TestSyncUsers:
    """Test full user re-sync"""

    def test_sync_all_users(self, client, super_admin_headers, test_user, test_orchestrator, no_outbound_sync):
        response = client.post(f"{BASE}/sync-users/", headers=super_admin_headers, json={"app_name": "crm"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Users synced with crm", "total": 2, "errors": 0}
        assert no_outbound_sync.call_count == 2

    def test_unknown_app(self, client, super_admin_headers):
        response = client.post(f"{BASE}/sync-users/", headers=super_admin_headers, json={"app_name": "nope"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_errors_reported(self, client, super_admin_headers, test_user, test_orchestrator):
        with patch.object(sync_producer, "sync_user", side_effect=RuntimeError("boom")):
            response = client.post(f"{BASE}/sync-users/", headers=super_admin_headers, json={"app_name": "crm"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["message"] == "Sync completed with 2 errors of 2 users"
