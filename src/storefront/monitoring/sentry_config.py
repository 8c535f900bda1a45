"""
Sentry integration for error tracking and performance monitoring.
"""

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

# Client errors that are part of normal operation
IGNORED_EXCEPTIONS = (
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
)


def setup_sentry(
    dsn: Optional[str] = None,
    environment: str = "development",
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN; Sentry stays disabled when empty
        environment: Deployment environment (development, testing, production)
        release: Release version (e.g., "storefront@1.0.0")
        traces_sample_rate: Percentage of transactions to trace (0.0-1.0)

    Returns:
        bool: True if Sentry was initialized
    """
    if not dsn:
        logger.info("Sentry DSN not configured, skipping Sentry initialization")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        traces_sample_rate=traces_sample_rate,
        before_send=before_send_filter,
        attach_stacktrace=True,
        send_default_pii=False,
        max_breadcrumbs=50,
    )

    logger.info(f"Sentry initialized: environment={environment}, traces_sample_rate={traces_sample_rate}")
    return True


def before_send_filter(event, hint):
    """
    Drop expected client errors (4xx) before they reach Sentry.

    Returns:
        The event, or None to drop it
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if exc_type.__name__ in IGNORED_EXCEPTIONS:
            return None

    return event


def set_user_context(user_id: Optional[str] = None, tenant_id: Optional[str] = None):
    """Attach the authenticated user and tenant to subsequent events."""
    context = {}
    if user_id:
        context["id"] = user_id
    if tenant_id:
        context["tenant_id"] = tenant_id
    if context:
        sentry_sdk.set_user(context)
