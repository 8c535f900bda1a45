"""
Storefront API - multi-tenant e-commerce backend.

Users and authentication, tenant-scoped product catalog, shopping carts
and an orchestrator registry that receives user-sync webhooks.
"""

__version__ = "1.0.0"
__author__ = "Storefront Team"
