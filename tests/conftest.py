"""
Test configuration and fixtures for Storefront
"""
import os

# Settings are read when the app module is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_TO_FILE", "false")

from typing import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from storefront.api.main import app
from storefront.auth.jwt_manager import create_access_token
from storefront.auth.password import hash_password
from storefront.database.connection import build_engine, get_db
from storefront.database.models import (
    AccessLevel,
    Orchestrator,
    Product,
    Profile,
    Tenant,
    TenantUser,
    User,
)
from storefront.database.models.base import Base


# =============================================================================
# Test Database Setup
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test"""
    engine = build_engine(os.getenv("TEST_DATABASE_URL", "sqlite://"))
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """Create a new database session for each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# FastAPI Test Client
# =============================================================================

@pytest.fixture(scope="function")
def client(db_session) -> TestClient:
    """Create FastAPI test client with overridden dependencies"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_outbound_sync():
    """Block real HTTP from the user sync producer"""
    with patch("storefront.services.sync_producer.requests.post") as mock_post:
        mock_post.return_value.status_code = 200
        mock_post.return_value.text = "ok"
        yield mock_post


# =============================================================================
# Test Data Fixtures
# =============================================================================

@pytest.fixture
def test_user_data():
    """Test user data"""
    return {
        "email": "shopper@example.com",
        "password": "Password123",
        "first_name": "Ana",
        "last_name": "Souza",
    }


def make_user(db_session, email, password="Password123", access_level=AccessLevel.USER.value):
    user = User(
        username=email.split("@")[0],
        email=email,
        first_name="Test",
        last_name="User",
        password=hash_password(password),
    )
    user.profile = Profile(access_level=access_level)
    db_session.add(user)
    db_session.flush()

    tenant = Tenant(user_id=user.id, tenant_type="storefront")
    db_session.add(tenant)
    db_session.flush()
    db_session.add(TenantUser(tenant_id=tenant.id, user_id=user.id))
    db_session.commit()
    return user, tenant


@pytest.fixture
def test_user(db_session, test_user_data):
    """Create a user with profile and tenant"""
    return make_user(db_session, test_user_data["email"], test_user_data["password"])


@pytest.fixture
def test_tenant(test_user):
    return test_user[1]


@pytest.fixture
def auth_token(test_user):
    """Access token for the test user"""
    user, tenant = test_user
    return create_access_token(str(user.id), str(tenant.id), AccessLevel.USER.value)


@pytest.fixture
def auth_headers(auth_token):
    """Authorization headers with access token"""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def super_admin_headers(db_session):
    """Authorization headers of a super_admin in its own tenant"""
    user, tenant = make_user(db_session, "root@example.com", access_level=AccessLevel.SUPER_ADMIN.value)
    token = create_access_token(str(user.id), str(tenant.id), AccessLevel.SUPER_ADMIN.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(db_session):
    user, tenant = make_user(db_session, "admin@example.com", access_level=AccessLevel.ADMIN.value)
    token = create_access_token(str(user.id), str(tenant.id), AccessLevel.ADMIN.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_product(db_session, test_tenant):
    """In-stock product priced at 19.90"""
    product = Product(
        tenant_id=test_tenant.id,
        name="Blue Mug",
        slug="blue-mug",
        short_description="Ceramic mug",
        price_cents=1990,
        stock_quantity=5,
        attributes={"color": "blue"},
        is_active=True,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture
def test_orchestrator(db_session):
    orchestrator = Orchestrator(app_name="crm", app_url="https://crm.example.com")
    db_session.add(orchestrator)
    db_session.commit()
    return orchestrator


@pytest.fixture
def other_tenant_headers(db_session):
    """Authorization headers of a plain user in a different tenant"""
    user, tenant = make_user(db_session, "other@example.com")
    token = create_access_token(str(user.id), str(tenant.id), AccessLevel.USER.value)
    return {"Authorization": f"Bearer {token}"}
