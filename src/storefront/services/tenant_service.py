"""
Tenant resolution for users.
"""

import uuid

from sqlalchemy.orm import Session

from storefront.database.models import Tenant
from storefront.database.models.tenant import DEFAULT_TENANT_TYPE
from storefront.repositories import TenantRepository
from storefront.utils.exceptions import NotFoundError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class TenantService:
    """Creates tenants and links users to them. Does not commit."""

    def __init__(self, db: Session):
        self.tenants = TenantRepository(db)

    def find_or_create_for_user(self, user_id: uuid.UUID) -> Tenant:
        """The user's tenant, creating a default one when they have none."""
        tenant = self.tenants.find_for_user(user_id)
        if tenant is None:
            tenant = self.tenants.create(user_id, DEFAULT_TENANT_TYPE)
            logger.info(f"Created default tenant {tenant.id} for user {user_id}")
        return tenant

    def create_for_user(self, user_id: uuid.UUID, tenant_type: str) -> Tenant:
        tenant = self.tenants.create(user_id, tenant_type)
        logger.info(f"Created tenant {tenant.id} ({tenant_type}) for user {user_id}")
        return tenant

    def join(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> Tenant:
        """
        Add the user to an existing tenant.

        Raises:
            NotFoundError: If the tenant does not exist or is deleted
        """
        tenant = self.tenants.find_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found", {"tenant_id": str(tenant_id)})
        self.tenants.add_member(tenant.id, user_id)
        return tenant
