"""
Authenticated user routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from storefront.api.middleware.auth_context import (
    get_current_claims,
    get_current_token,
    require_access_level,
)
from storefront.api.routes.auth import to_auth_response
from storefront.api.schemas import AuthResponse, ProfileFields, UpdateUserRequest, UserResponse
from storefront.database.connection import get_db
from storefront.database.models import AccessLevel
from storefront.services.user_service import UserService
from storefront.utils.pagination import PaginatedResponse, PaginationParams

router = APIRouter()


@router.get("/me/", response_model=AuthResponse)
def get_me(
    claims: Dict[str, Any] = Depends(get_current_claims),
    token: str = Depends(get_current_token),
    db: Session = Depends(get_db),
):
    """Current user, tenant and the token in use with its remaining lifetime."""
    return to_auth_response(UserService(db).get_me(claims, token))


@router.patch("/profile/", response_model=UserResponse)
def update_profile(
    data: ProfileFields,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_profile(claims["sub"], data.model_dump(exclude_unset=True))
    return UserResponse.build(user)


@router.get("/", response_model=PaginatedResponse[UserResponse])
def list_users(
    pagination: PaginationParams = Depends(),
    claims: Dict[str, Any] = Depends(
        require_access_level(AccessLevel.ADMIN.value, AccessLevel.SUPER_ADMIN.value)
    ),
    db: Session = Depends(get_db),
):
    """List users (admin and super_admin only), newest first."""
    users, total = UserService(db).list_users(pagination.limit, pagination.offset)
    return PaginatedResponse[UserResponse](
        count=total,
        results=[UserResponse.build(user) for user in users],
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.patch("/", response_model=UserResponse)
def update_user(
    data: UpdateUserRequest,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_user(claims["sub"], data.model_dump(exclude_unset=True))
    return UserResponse.build(user)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Soft delete the current user."""
    UserService(db).delete_user(claims["sub"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
