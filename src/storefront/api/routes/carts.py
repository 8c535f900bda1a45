"""
Shopping cart routes. All operations act on the caller's tenant.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid

from fastapi import APIRouter, Depends, Response, status
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from storefront.api.middleware.auth_context import get_current_claims
from storefront.database.connection import get_db
from storefront.database.models import CartStatus
from storefront.services.cart_service import CartService

router = APIRouter()


class AddItemRequest(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1, le=1000)
    variant_id: Optional[uuid.UUID] = None


class UpdateItemRequest(BaseModel):
    quantity: int = Field(..., ge=0, le=1000, description="0 removes the item")


class CartItemResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    unit_price_cents: int
    quantity: int
    line_discount_total_cents: int
    line_tax_total_cents: int
    line_total_cents: int
    attributes_snapshot: Dict[str, Any]
    dt_created: datetime
    dt_updated: datetime

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    status: CartStatus
    currency: str
    subtotal_cents: int
    discount_total_cents: int
    tax_total_cents: int
    shipping_total_cents: int
    grand_total_cents: int
    version: int
    expires_at: Optional[datetime] = None
    items: List[CartItemResponse] = Field(default_factory=list, validation_alias=AliasChoices("active_items", "items"))
    dt_created: datetime
    dt_updated: datetime

    class Config:
        from_attributes = True


def _tenant_and_user(claims: Dict[str, Any]):
    return uuid.UUID(claims["tenant_id"]), uuid.UUID(claims["sub"])


@router.get("/", response_model=CartResponse)
def get_active_cart(
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """The tenant's active cart with its items."""
    tenant_id, _ = _tenant_and_user(claims)
    return CartResponse.model_validate(CartService(db).get_active_cart(tenant_id))


@router.get("/all/", response_model=List[CartResponse])
def list_carts(
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """All non-deleted carts of the tenant, most recently updated first."""
    tenant_id, _ = _tenant_and_user(claims)
    return [CartResponse.model_validate(cart) for cart in CartService(db).list_carts(tenant_id)]


@router.post("/", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def create_cart(
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    tenant_id, user_id = _tenant_and_user(claims)
    return CartResponse.model_validate(CartService(db).create_cart(tenant_id, user_id))


@router.post("/items/", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_item(
    data: AddItemRequest,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """
    Add a product to the active cart (created on demand).

    Returns the whole cart with recomputed totals.
    """
    tenant_id, user_id = _tenant_and_user(claims)
    cart = CartService(db).add_item(tenant_id, user_id, data.product_id, data.quantity, data.variant_id)
    return CartResponse.model_validate(cart)


@router.patch("/items/{item_id}/", response_model=CartResponse)
def update_item(
    item_id: uuid.UUID,
    data: UpdateItemRequest,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    tenant_id, _ = _tenant_and_user(claims)
    return CartResponse.model_validate(CartService(db).update_item_quantity(tenant_id, item_id, data.quantity))


@router.delete("/items/{item_id}/", response_model=CartResponse)
def remove_item(
    item_id: uuid.UUID,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    tenant_id, _ = _tenant_and_user(claims)
    return CartResponse.model_validate(CartService(db).remove_item(tenant_id, item_id))


@router.delete("/{cart_id}/", status_code=status.HTTP_204_NO_CONTENT)
def delete_cart(
    cart_id: uuid.UUID,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Cancel and soft delete a cart."""
    tenant_id, _ = _tenant_and_user(claims)
    CartService(db).delete_cart(tenant_id, cart_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
