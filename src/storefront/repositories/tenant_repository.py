"""
Tenant and membership queries.
"""

from typing import Optional
import uuid

from sqlalchemy.orm import Session

from storefront.database.models import Tenant, TenantUser


class TenantRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, tenant_id: uuid.UUID) -> Optional[Tenant]:
        return (
            self.db.query(Tenant)
            .filter(Tenant.id == tenant_id, Tenant.dt_deleted.is_(None))
            .first()
        )

    def find_for_user(self, user_id: uuid.UUID) -> Optional[Tenant]:
        """First (oldest) non-deleted tenant the user is a member of."""
        return (
            self.db.query(Tenant)
            .join(TenantUser, TenantUser.tenant_id == Tenant.id)
            .filter(TenantUser.user_id == user_id, Tenant.dt_deleted.is_(None))
            .order_by(TenantUser.dt_created)
            .first()
        )

    def create(self, user_id: uuid.UUID, tenant_type: str) -> Tenant:
        """Create a tenant owned by the user and make the user a member."""
        tenant = Tenant(user_id=user_id, tenant_type=tenant_type)
        self.db.add(tenant)
        self.db.flush()
        self.add_member(tenant.id, user_id)
        return tenant

    def add_member(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> TenantUser:
        existing = (
            self.db.query(TenantUser)
            .filter(TenantUser.tenant_id == tenant_id, TenantUser.user_id == user_id)
            .first()
        )
        if existing:
            return existing

        membership = TenantUser(tenant_id=tenant_id, user_id=user_id)
        self.db.add(membership)
        self.db.flush()
        return membership
