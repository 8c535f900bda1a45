"""
SQLAlchemy database models for the multi-tenant storefront.

Models:
- User / Profile: accounts, personal data and access level
- UserToken: single-use email confirmation and password reset codes
- Tenant / TenantUser: multi-tenancy boundary and memberships
- Product: tenant-scoped catalog items
- Cart / CartItem: shopping carts with computed totals
- Orchestrator: external apps receiving user-sync webhooks
"""

from .base import Base, utcnow
from .user import User
from .profile import Profile, AccessLevel
from .user_token import UserToken, TokenType
from .tenant import Tenant, TenantUser
from .product import Product
from .cart import Cart, CartItem, CartStatus
from .orchestrator import Orchestrator

__all__ = [
    "Base",
    "utcnow",
    "User",
    "Profile",
    "AccessLevel",
    "UserToken",
    "TokenType",
    "Tenant",
    "TenantUser",
    "Product",
    "Cart",
    "CartItem",
    "CartStatus",
    "Orchestrator",
]
