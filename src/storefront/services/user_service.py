"""
User account service: registration, login, email confirmation,
password reset, identity provider login and profile management.

Every change to a user's visible data is pushed to the registered
orchestrators after the transaction commits.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import uuid

from sqlalchemy.orm import Session

from storefront.auth import get_jwt_manager, hash_password, verify_password
from storefront.auth.identity_provider import KeycloakClient, map_roles_to_access_level
from storefront.database.models import AccessLevel, Profile, Tenant, TokenType, User
from storefront.database.models.tenant import SIGNUP_TENANT_TYPE
from storefront.monitoring import get_metrics
from storefront.repositories import UserRepository, UserTokenRepository
from storefront.services import sync_producer
from storefront.services.tenant_service import TenantService
from storefront.utils.config import Settings, get_settings
from storefront.utils.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from storefront.utils.formatter import generate_username_from_email
from storefront.utils.logger import get_logger
from storefront.utils.transaction import transaction_scope

logger = get_logger(__name__)


@dataclass
class AuthSession:
    """An issued session: the user, its tenant and a signed token."""
    user: User
    tenant: Tenant
    token: str
    expires_in: int


class UserService:
    """
    High-level service for user accounts.

    Args:
        db: Request database session
        settings: Optional settings override
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.users = UserRepository(db)
        self.tokens = UserTokenRepository(db)
        self.tenant_service = TenantService(db)
        self.metrics = get_metrics()

    # Registration and login

    def register(self, data: Dict[str, Any]) -> AuthSession:
        """
        Create a user with profile and tenant, then issue a session.

        Args:
            data: Validated registration payload (email, password, first_name,
                last_name, optional tenant_id and profile)

        Returns:
            AuthSession for the new user

        Raises:
            ConflictError: If the email is already registered
            NotFoundError: If the requested tenant does not exist
        """
        email = data["email"]
        if self.users.email_taken(email):
            self.metrics.track_auth("register", "failure")
            raise ConflictError("Email already registered")

        profile_fields = data.get("profile") or {}

        with transaction_scope(self.db):
            user = User(
                username=generate_username_from_email(email),
                email=email,
                first_name=data["first_name"],
                last_name=data["last_name"],
                password=hash_password(data["password"]),
            )
            # Elevated access levels are granted through the CLI only
            profile = Profile(access_level=AccessLevel.USER.value, **profile_fields)
            self.users.create_with_profile(user, profile)

            if data.get("tenant_id"):
                tenant = self.tenant_service.join(data["tenant_id"], user.id)
            else:
                tenant = self.tenant_service.create_for_user(user.id, SIGNUP_TENANT_TYPE)

            confirmation = self.tokens.create(user.id, TokenType.CONFIRM_EMAIL.value)

        self._deliver_code(user, confirmation.code, TokenType.CONFIRM_EMAIL)
        logger.info(f"Registered user {user.email} in tenant {tenant.id}")
        self.metrics.track_auth("register", "success")

        self._sync(user)
        return self._issue_session(user, tenant)

    def login(self, email: str, password: str) -> AuthSession:
        """
        Authenticate with email and password.

        Raises:
            AuthenticationError: Unknown email or wrong password
            NotFoundError: User has no profile
        """
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password):
            self.metrics.track_auth("password", "failure")
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid credentials")

        if user.profile is None:
            raise NotFoundError("Profile not found")

        with transaction_scope(self.db):
            tenant = self.tenant_service.find_or_create_for_user(user.id)

        self.metrics.track_auth("password", "success")
        logger.info(f"User {user.email} logged in")
        return self._issue_session(user, tenant)

    def login_with_identity_provider(self, provider_token: str,
                                     client: Optional[KeycloakClient] = None) -> AuthSession:
        """
        Exchange an identity provider token for a local session.

        Unknown users are provisioned with an empty password, a profile
        whose confirm_email mirrors the provider's email_verified, and a
        fresh tenant. The access level always follows the provider roles.
        """
        client = client or KeycloakClient(self.settings)
        try:
            info = client.introspect(provider_token)
        except AuthenticationError:
            self.metrics.track_auth("keycloak", "failure")
            raise

        access_level = map_roles_to_access_level(info, client.client_id)
        user = self.users.find_by_email(info.email)
        created = user is None

        with transaction_scope(self.db):
            if created:
                user = User(
                    username=generate_username_from_email(info.email),
                    email=info.email,
                    first_name=info.given_name or "",
                    last_name=info.family_name or "",
                    password="",
                )
                profile = Profile(confirm_email=info.email_verified, access_level=access_level)
                self.users.create_with_profile(user, profile)
                tenant = self.tenant_service.create_for_user(user.id, SIGNUP_TENANT_TYPE)
                logger.info(f"Provisioned user {user.email} from identity provider")
            else:
                if user.profile is None:
                    raise NotFoundError("Profile not found")
                user.profile.access_level = access_level
                tenant = self.tenant_service.find_or_create_for_user(user.id)

        if created:
            self._sync(user)

        self.metrics.track_auth("keycloak", "success")
        logger.info(f"User {user.email} logged in through identity provider")
        return self._issue_session(user, tenant)

    # Email confirmation and password reset

    def confirm_email(self, code: str) -> User:
        """
        Mark the user's email as confirmed.

        Raises:
            ValidationError: Unknown, expired or consumed code
        """
        with transaction_scope(self.db):
            token = self.tokens.find_valid(code, TokenType.CONFIRM_EMAIL.value)
            if token is None:
                raise ValidationError("Invalid or expired code")

            user = self.users.find_by_id(token.user_id)
            if user is None or user.profile is None:
                raise NotFoundError("User not found")

            user.profile.confirm_email = True
            self.tokens.consume(token)

        logger.info(f"Email confirmed for {user.email}")
        self._sync(user)
        return user

    def forgot_password(self, email: str) -> None:
        """Issue a password reset code for the account."""
        user = self.users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        with transaction_scope(self.db):
            token = self.tokens.create(user.id, TokenType.RESET_PASSWORD.value)

        self._deliver_code(user, token.code, TokenType.RESET_PASSWORD)

    def change_password(self, code: str, password: str) -> None:
        """
        Set a new password using a reset code.

        Raises:
            ValidationError: Unknown, expired or consumed code
        """
        with transaction_scope(self.db):
            token = self.tokens.find_valid(code, TokenType.RESET_PASSWORD.value)
            if token is None:
                raise ValidationError("Invalid or expired code")

            user = self.users.find_by_id(token.user_id)
            if user is None:
                raise NotFoundError("User not found")

            user.password = hash_password(password)
            self.tokens.consume(token)

        logger.info(f"Password changed for {user.email}")

    # Current user

    def get_me(self, claims: Dict[str, Any], token: str) -> AuthSession:
        """The authenticated user with the session it is using."""
        user = self.get_user(claims["sub"])
        tenant = self.tenant_service.tenants.find_by_id(uuid.UUID(claims["tenant_id"]))
        if tenant is None:
            raise NotFoundError("Tenant not found")

        return AuthSession(
            user=user,
            tenant=tenant,
            token=token,
            expires_in=get_jwt_manager().seconds_until_expiry(claims),
        )

    def get_user(self, user_id) -> User:
        user = self.users.find_by_id(uuid.UUID(str(user_id)))
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(self, limit: int, offset: int) -> Tuple[List[User], int]:
        return self.users.list_paginated(limit, offset)

    def update_user(self, user_id, changes: Dict[str, Any]) -> User:
        user = self.get_user(user_id)
        with transaction_scope(self.db):
            for field in ("first_name", "last_name"):
                if changes.get(field) is not None:
                    setattr(user, field, changes[field])

        self._sync(user)
        return user

    def update_profile(self, user_id, changes: Dict[str, Any]) -> User:
        user = self.get_user(user_id)
        if user.profile is None:
            raise NotFoundError("Profile not found")

        with transaction_scope(self.db):
            for field, value in changes.items():
                if value is not None:
                    setattr(user.profile, field, value)

        self._sync(user)
        return user

    def delete_user(self, user_id) -> None:
        user = self.get_user(user_id)
        with transaction_scope(self.db):
            self.users.soft_delete(user)
        logger.info(f"User {user.email} deleted")

    def set_access_level(self, email: str, access_level: str) -> User:
        """Grant an access level (CLI administration)."""
        valid = [level.value for level in AccessLevel]
        if access_level not in valid:
            raise ValidationError(f"Access level must be one of: {', '.join(valid)}")

        user = self.users.find_by_email(email)
        if user is None or user.profile is None:
            raise NotFoundError("User not found")

        with transaction_scope(self.db):
            user.profile.access_level = access_level

        logger.info(f"Access level of {email} set to {access_level}")
        return user

    # Helpers

    def _issue_session(self, user: User, tenant: Tenant) -> AuthSession:
        access_level = user.profile.access_level if user.profile else AccessLevel.USER.value
        manager = get_jwt_manager()
        token = manager.create_access_token(str(user.id), str(tenant.id), access_level)
        claims = manager.verify_token(token)
        return AuthSession(user=user, tenant=tenant, token=token,
                        expires_in=manager.seconds_until_expiry(claims))

    def _sync(self, user: User) -> None:
        sync_producer.safe_sync_user(self.db, user, timeout=self.settings.sync_timeout)

    @staticmethod
    def _deliver_code(user: User, code: str, token_type: TokenType) -> None:
        # TODO: send through an email provider once one is configured
        logger.info(f"{token_type.value} code for {user.email}: {code}")
