"""
Repository layer: ORM queries per aggregate.

Repositories never commit. Services own the transaction through
transaction_scope.
"""

from .user_repository import UserRepository, UserTokenRepository
from .tenant_repository import TenantRepository
from .product_repository import ProductRepository, ProductFilters
from .cart_repository import CartRepository
from .orchestrator_repository import OrchestratorRepository

__all__ = [
    "UserRepository",
    "UserTokenRepository",
    "TenantRepository",
    "ProductRepository",
    "ProductFilters",
    "CartRepository",
    "OrchestratorRepository",
]
