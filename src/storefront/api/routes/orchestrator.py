"""
Orchestrator registry routes.

``admin_router`` (super_admin only) manages registrations; ``router``
holds the public token check that registered apps call.
"""

from datetime import datetime
from typing import Optional
import uuid

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from storefront.api.middleware.auth_context import require_access_level
from storefront.api.schemas import MessageResponse
from storefront.database.connection import get_db
from storefront.database.models import AccessLevel
from storefront.services.orchestrator_service import OrchestratorService
from storefront.utils.pagination import PaginatedResponse, PaginationParams
from storefront.utils.validation import validate_url

router = APIRouter()
admin_router = APIRouter(
    dependencies=[Depends(require_access_level(AccessLevel.SUPER_ADMIN.value))]
)


class OrchestratorCreate(BaseModel):
    app_name: str = Field(..., min_length=2, max_length=100)
    app_url: str = Field(..., max_length=500)

    @field_validator("app_url")
    @classmethod
    def check_url(cls, v):
        return validate_url(v)


class OrchestratorUpdate(BaseModel):
    app_name: Optional[str] = Field(None, min_length=2, max_length=100)
    app_url: Optional[str] = Field(None, max_length=500)

    @field_validator("app_url")
    @classmethod
    def check_url(cls, v):
        return validate_url(v) if v is not None else v


class OrchestratorResponse(BaseModel):
    id: uuid.UUID
    app_name: str
    app_url: str
    app_token: uuid.UUID
    dt_created: datetime
    dt_updated: datetime

    class Config:
        from_attributes = True


class OrchestratorEnvelope(BaseModel):
    message: str
    data: OrchestratorResponse


class OrchestratorListEnvelope(BaseModel):
    message: str
    data: PaginatedResponse[OrchestratorResponse]


class SyncUsersRequest(BaseModel):
    app_name: str = Field(..., min_length=1, max_length=100)


class SyncUsersResponse(BaseModel):
    message: str
    total: int
    errors: int


class AuthorizeAppResponse(BaseModel):
    app_name: str
    status: str


@router.get("/authorize/{app_token}/", response_model=AuthorizeAppResponse)
def authorize_app(app_token: str, db: Session = Depends(get_db)):
    """Tell a registered application whether its token is valid."""
    return OrchestratorService(db).authorize_app(app_token)


@admin_router.get("/", response_model=OrchestratorListEnvelope)
def list_orchestrators(pagination: PaginationParams = Depends(), db: Session = Depends(get_db)):
    items, total = OrchestratorService(db).list_orchestrators(pagination.limit, pagination.offset)
    return OrchestratorListEnvelope(
        message="Orchestrators retrieved successfully",
        data=PaginatedResponse[OrchestratorResponse](
            count=total,
            results=[OrchestratorResponse.model_validate(o) for o in items],
            limit=pagination.limit,
            offset=pagination.offset,
        ),
    )


@admin_router.post("/", response_model=OrchestratorEnvelope, status_code=status.HTTP_201_CREATED)
def create_orchestrator(data: OrchestratorCreate, db: Session = Depends(get_db)):
    """Register an application; its app_token is generated here."""
    orchestrator = OrchestratorService(db).create_orchestrator(data.app_name, data.app_url)
    return OrchestratorEnvelope(
        message="Orchestrator created successfully",
        data=OrchestratorResponse.model_validate(orchestrator),
    )


@admin_router.post("/sync-users/", response_model=SyncUsersResponse)
def sync_users(data: SyncUsersRequest, db: Session = Depends(get_db)):
    """Push every user to the named application."""
    result = OrchestratorService(db).sync_all_users(data.app_name)
    return SyncUsersResponse(message=f"Users synced with {data.app_name}", **result)


@admin_router.get("/{orchestrator_id}/", response_model=OrchestratorEnvelope)
def get_orchestrator(orchestrator_id: uuid.UUID, db: Session = Depends(get_db)):
    orchestrator = OrchestratorService(db).get_orchestrator(orchestrator_id)
    return OrchestratorEnvelope(
        message="Orchestrator retrieved successfully",
        data=OrchestratorResponse.model_validate(orchestrator),
    )


@admin_router.patch("/{orchestrator_id}/", response_model=OrchestratorEnvelope)
def update_orchestrator(orchestrator_id: uuid.UUID, data: OrchestratorUpdate, db: Session = Depends(get_db)):
    orchestrator = OrchestratorService(db).update_orchestrator(
        orchestrator_id, data.model_dump(exclude_unset=True)
    )
    return OrchestratorEnvelope(
        message="Orchestrator updated successfully",
        data=OrchestratorResponse.model_validate(orchestrator),
    )


@admin_router.delete("/{orchestrator_id}/", response_model=MessageResponse)
def delete_orchestrator(orchestrator_id: uuid.UUID, db: Session = Depends(get_db)):
    OrchestratorService(db).delete_orchestrator(orchestrator_id)
    return MessageResponse(message="Orchestrator deleted successfully")
