"""
Product catalog routes.
"""

from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from storefront.api.middleware.auth_context import get_current_claims
from storefront.database.connection import get_db
from storefront.repositories import ProductFilters
from storefront.services.product_service import DEFAULT_PAGE_SIZE, ProductService
from storefront.utils.pagination import PaginatedResponse

router = APIRouter()


class ProductCreate(BaseModel):
    """Product creation request. Prices are in cents."""
    name: str = Field(..., min_length=2, max_length=255)
    short_description: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    price_cents: int = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update."""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    short_description: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    attributes: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    slug: str
    short_description: Optional[str] = None
    description: Optional[str] = None
    price_cents: int
    stock_quantity: int
    attributes: Dict[str, Any]
    is_active: bool
    dt_created: datetime
    dt_updated: datetime

    class Config:
        from_attributes = True


@router.get("/", response_model=PaginatedResponse[ProductResponse])
def list_products(
    name: Optional[str] = Query(None, description="Case-insensitive name search"),
    min_price: Optional[int] = Query(None, ge=0, description="Minimum price in cents"),
    max_price: Optional[int] = Query(None, ge=0, description="Maximum price in cents"),
    is_active: Optional[bool] = Query(None),
    tenant_id: Optional[uuid.UUID] = Query(None, description="Only products of this tenant"),
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Clamped to 1-100"),
    offset: int = Query(0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """
    List catalog products with filters, newest first.
    """
    filters = ProductFilters(
        name=name,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
        tenant_id=tenant_id,
    )
    products, total, limit, offset = ProductService(db).list_products(filters, limit, offset)

    return PaginatedResponse[ProductResponse](
        count=total,
        results=[ProductResponse.model_validate(p) for p in products],
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Create a product in the caller's tenant."""
    tenant_id = uuid.UUID(claims["tenant_id"])
    return ProductService(db).create_product(tenant_id, data.model_dump())


@router.get("/{product_id}/", response_model=ProductResponse)
def get_product(
    product_id: uuid.UUID,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return ProductService(db).get_product(product_id)


@router.put("/{product_id}/", response_model=ProductResponse)
def update_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Update a product owned by the caller's tenant."""
    tenant_id = uuid.UUID(claims["tenant_id"])
    return ProductService(db).update_product(tenant_id, product_id, data.model_dump(exclude_unset=True))


@router.delete("/{product_id}/", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    tenant_id = uuid.UUID(claims["tenant_id"])
    ProductService(db).delete_product(tenant_id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
