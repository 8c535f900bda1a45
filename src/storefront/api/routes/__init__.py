"""
API route modules.
"""

from . import auth, users, products, carts, orchestrator, health

__all__ = ["auth", "users", "products", "carts", "orchestrator", "health"]
