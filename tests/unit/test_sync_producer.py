"""
Unit tests for the orchestrator user sync producer
"""
from unittest.mock import patch

import pytest
import requests

from storefront.database.models import Orchestrator
from storefront.database.models.orchestrator import RESERVED_APP_NAME
from storefront.services import sync_producer


@pytest.fixture
def orchestrators(db_session):
    apps = [
        Orchestrator(app_name="crm", app_url="https://crm.example.com/"),
        Orchestrator(app_name="erp", app_url="https://erp.example.com"),
        Orchestrator(app_name=RESERVED_APP_NAME, app_url="https://auth.example.com"),
    ]
    db_session.add_all(apps)
    db_session.commit()
    return apps


class TestSyncUser:
    """Test best-effort user delivery"""

    def test_payload_shape(self, test_user):
        user, _ = test_user
        payload = sync_producer.build_user_payload(user)

        assert payload["obj_type"] == "sync_user"
        assert payload["obj_cmd"] == "put"
        assert payload["obj_data"]["user"]["email"] == user.email
        assert "password" not in payload["obj_data"]["user"]

    def test_delivers_to_all_but_reserved_app(self, db_session, test_user, orchestrators, no_outbound_sync):
        user, _ = test_user

        delivered = sync_producer.sync_user(db_session, user)

        assert delivered == 2
        urls = [call.args[0] for call in no_outbound_sync.call_args_list]
        assert urls == [
            "https://crm.example.com/v1/event-sync/",
            "https://erp.example.com/v1/event-sync/",
        ]
        headers = no_outbound_sync.call_args_list[0].kwargs["headers"]
        assert headers["Authorization"] == f"Token {orchestrators[0].app_token}"

    def test_app_name_filter(self, db_session, test_user, orchestrators, no_outbound_sync):
        user, _ = test_user

        assert sync_producer.sync_user(db_session, user, app_name="erp") == 1
        assert no_outbound_sync.call_count == 1

    def test_rejection_is_not_counted(self, db_session, test_user, orchestrators, no_outbound_sync):
        user, _ = test_user
        no_outbound_sync.return_value.status_code = 500

        assert sync_producer.sync_user(db_session, user) == 0

    def test_timeout_does_not_stop_other_deliveries(self, db_session, test_user, orchestrators):
        user, _ = test_user
        ok = type("Response", (), {"status_code": 204, "text": ""})()

        with patch("storefront.services.sync_producer.requests.post",
                   side_effect=[requests.exceptions.Timeout(), ok]) as mock_post:
            delivered = sync_producer.sync_user(db_session, user)

        assert delivered == 1
        assert mock_post.call_count == 2

    def test_safe_sync_swallows_failures(self, db_session, test_user):
        user, _ = test_user

        with patch.object(sync_producer, "sync_user", side_effect=RuntimeError("boom")):
            assert sync_producer.safe_sync_user(db_session, user) == 0

    def test_failures_logged_on_storefront_logger(self, db_session, test_user, orchestrators, no_outbound_sync):
        user, _ = test_user
        no_outbound_sync.side_effect = requests.exceptions.Timeout()

        with patch.object(sync_producer.logger, "error") as log_error:
            assert sync_producer.sync_user(db_session, user) == 0

        assert sync_producer.logger.name == "storefront.services.sync_producer"
        assert log_error.call_count == 2
