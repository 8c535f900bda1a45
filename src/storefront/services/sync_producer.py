"""
User sync producer for registered orchestrator applications.

Pushes a snapshot of a user to every registered orchestrator:
- sequential best-effort HTTP POST, no retry
- failures are logged and skipped, never raised to the caller
"""

from typing import Any, Dict, Iterable, Optional

import requests
from sqlalchemy.orm import Session

from storefront.database.models import User, Orchestrator
from storefront.database.models.orchestrator import RESERVED_APP_NAME
from storefront.monitoring import get_metrics
from storefront.repositories import OrchestratorRepository
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

# Default request timeout in seconds
SYNC_TIMEOUT = 10


def build_user_payload(user: User) -> Dict[str, Any]:
    """
    Build the sync event for a user.

    Args:
        user: User with profile loaded

    Returns:
        Event dict with obj_type, obj_data and obj_cmd
    """
    return {
        "obj_type": "sync_user",
        "obj_data": {"user": user.to_dict(include_profile=True)},
        "obj_cmd": "put",
    }


def sync_user(
    db: Session,
    user: User,
    app_name: Optional[str] = None,
    timeout: int = SYNC_TIMEOUT,
) -> int:
    """
    Send a user snapshot to registered orchestrators.

    Args:
        db: Database session used to list orchestrators
        user: User to synchronize
        app_name: Only deliver to orchestrators with this name
        timeout: Per-request timeout in seconds

    Returns:
        int: Number of orchestrators that accepted the event
    """
    orchestrators = OrchestratorRepository(db).list_all()
    payload = build_user_payload(user)

    delivered = 0
    for orchestrator in _targets(orchestrators, app_name):
        if _send_event(orchestrator, payload, timeout):
            delivered += 1

    logger.info(f"User {user.email} synced to {delivered} orchestrator(s)")
    return delivered


def safe_sync_user(db: Session, user: User, app_name: Optional[str] = None,
                   timeout: int = SYNC_TIMEOUT) -> int:
    """sync_user that never fails the calling request."""
    try:
        return sync_user(db, user, app_name=app_name, timeout=timeout)
    except Exception as e:
        logger.error(f"Error syncing user {user.id}: {e}", exc_info=True)
        return 0


def _targets(orchestrators: Iterable[Orchestrator], app_name: Optional[str]):
    for orchestrator in orchestrators:
        if app_name and orchestrator.app_name != app_name:
            continue
        if orchestrator.app_name == RESERVED_APP_NAME:
            continue
        yield orchestrator


def _send_event(orchestrator: Orchestrator, payload: Dict[str, Any], timeout: int) -> bool:
    """
    POST one event to an orchestrator.

    Returns:
        bool: True if delivered successfully (2xx)
    """
    url = orchestrator.event_sync_url
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Token {orchestrator.app_token}",
        "User-Agent": "Storefront/1.0",
    }
    metrics = get_metrics()

    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout)

        if 200 <= response.status_code < 300:
            logger.info(f"Sync event delivered to {orchestrator.app_name} ({url})")
            metrics.track_sync_delivery(orchestrator.app_name, "delivered")
            return True

        logger.warning(
            f"Sync to {orchestrator.app_name} failed with HTTP {response.status_code}: "
            f"{response.text[:200]}"
        )
        metrics.track_sync_delivery(orchestrator.app_name, "rejected")
        return False

    except requests.exceptions.Timeout:
        logger.error(f"Sync to {orchestrator.app_name} timed out after {timeout}s")
        metrics.track_sync_delivery(orchestrator.app_name, "timeout")
        return False

    except requests.exceptions.RequestException as e:
        logger.error(f"Sync to {orchestrator.app_name} failed: {e}")
        metrics.track_sync_delivery(orchestrator.app_name, "error")
        return False
