"""
Public authentication routes: registration, login, identity provider
login, email confirmation and password reset.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    KeycloakLoginRequest,
    KeycloakLoginResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from storefront.database.connection import get_db
from storefront.services.user_service import AuthSession, UserService
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def to_auth_response(session: AuthSession) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.build(session.user, session.tenant),
        token=session.token,
        expires_in=session.expires_in,
    )


@router.post("/register/", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user.

    Creates the user, profile and tenant (or joins ``tenant_id``), issues
    an email confirmation code and returns a session.
    """
    session = UserService(db).register(data.model_dump())
    return to_auth_response(session)


@router.post("/login/", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email and password."""
    session = UserService(db).login(data.email, data.password)
    return to_auth_response(session)


@router.post("/login-keycloak/", response_model=KeycloakLoginResponse)
def login_keycloak(data: KeycloakLoginRequest, db: Session = Depends(get_db)):
    """Exchange a Keycloak access token for a local session."""
    session = UserService(db).login_with_identity_provider(data.provider_token)
    return KeycloakLoginResponse(message="Login successful", data=to_auth_response(session))


@router.get("/confirm-email/{code}/", response_model=MessageResponse)
def confirm_email(code: str, db: Session = Depends(get_db)):
    UserService(db).confirm_email(code)
    return MessageResponse(message="Email confirmed successfully")


@router.post("/forgot-password/", response_model=MessageResponse)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Send a password reset code to the account's email."""
    UserService(db).forgot_password(data.email)
    return MessageResponse(message="Password reset code sent")


@router.post("/change-password/", response_model=MessageResponse)
def change_password(data: ChangePasswordRequest, db: Session = Depends(get_db)):
    UserService(db).change_password(data.code, data.password)
    return MessageResponse(message="Password changed successfully")
