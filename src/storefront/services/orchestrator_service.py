"""
Orchestrator registry service.

Manages the external applications that receive user-sync events, the
public token check they call, and full user re-syncs on demand.
"""

from typing import Any, Dict, List, Optional, Tuple
import uuid

from sqlalchemy.orm import Session

from storefront.database.models import Orchestrator
from storefront.repositories import OrchestratorRepository, UserRepository
from storefront.services import sync_producer
from storefront.utils.config import Settings, get_settings
from storefront.utils.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.utils.logger import get_logger
from storefront.utils.transaction import transaction_scope

logger = get_logger(__name__)

SYNC_BATCH_SIZE = 1000


class OrchestratorService:

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.orchestrators = OrchestratorRepository(db)
        self.users = UserRepository(db)

    def list_orchestrators(self, limit: int, offset: int) -> Tuple[List[Orchestrator], int]:
        return self.orchestrators.list_paginated(limit, offset)

    def create_orchestrator(self, app_name: str, app_url: str) -> Orchestrator:
        with transaction_scope(self.db):
            orchestrator = self.orchestrators.add(
                Orchestrator(app_name=app_name, app_url=app_url, app_token=uuid.uuid4())
            )
        logger.info(f"Registered orchestrator {orchestrator.app_name} ({orchestrator.app_url})")
        return orchestrator

    def get_orchestrator(self, orchestrator_id: uuid.UUID) -> Orchestrator:
        orchestrator = self.orchestrators.find_by_id(orchestrator_id)
        if orchestrator is None:
            raise NotFoundError("Orchestrator not found")
        return orchestrator

    def update_orchestrator(self, orchestrator_id: uuid.UUID, changes: Dict[str, Any]) -> Orchestrator:
        orchestrator = self.get_orchestrator(orchestrator_id)
        with transaction_scope(self.db):
            for field in ("app_name", "app_url"):
                if changes.get(field) is not None:
                    setattr(orchestrator, field, changes[field])
        logger.info(f"Updated orchestrator {orchestrator_id}")
        return orchestrator

    def delete_orchestrator(self, orchestrator_id: uuid.UUID) -> None:
        orchestrator = self.get_orchestrator(orchestrator_id)
        with transaction_scope(self.db):
            orchestrator.soft_delete()
        logger.info(f"Deleted orchestrator {orchestrator.app_name}")

    def authorize_app(self, app_token: str) -> Dict[str, str]:
        """
        Check an application token.

        Returns:
            {"app_name", "status"} where status is authorized or unauthorized

        Raises:
            ValidationError: If the token is not a UUID
        """
        try:
            token = uuid.UUID(app_token)
        except ValueError:
            raise ValidationError("Invalid app token format")

        orchestrator = self.orchestrators.find_by_token(token)
        if orchestrator is None:
            logger.warning("Authorization attempt with unknown app token")
            return {"app_name": "unknown", "status": "unauthorized"}

        return {"app_name": orchestrator.app_name, "status": "authorized"}

    def sync_all_users(self, app_name: str) -> Dict[str, int]:
        """
        Push every user to the orchestrator(s) registered as ``app_name``.

        Returns:
            {"total": users processed, "errors": 0}

        Raises:
            NotFoundError: No orchestrator with that name
            StorefrontError: One or more users could not be synced
        """
        if not self.orchestrators.exists_with_name(app_name):
            raise NotFoundError(f"Orchestrator '{app_name}' not found")

        total = 0
        errors = 0
        for batch in self.users.iter_batches(SYNC_BATCH_SIZE):
            for user in batch:
                total += 1
                if user.profile is None:
                    logger.error(f"User {user.id} has no profile, skipping sync")
                    errors += 1
                    continue
                try:
                    sync_producer.sync_user(self.db, user, app_name=app_name,
                                            timeout=self.settings.sync_timeout)
                except Exception as e:
                    logger.error(f"Error syncing user {user.id}: {e}", exc_info=True)
                    errors += 1

        if errors:
            raise StorefrontError(
                f"Sync completed with {errors} errors of {total} users",
                {"total": total, "errors": errors},
            )

        logger.info(f"Synced {total} users to {app_name}")
        return {"total": total, "errors": 0}
