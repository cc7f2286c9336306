"""
Test configuration and fixtures for the classifieds API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time; these must be set before the app is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-classifieds-test-suite")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"

import copy
import uuid
from typing import AsyncGenerator, Dict, Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from classifieds_api.main import app
from classifieds_api.database import Base, get_db
from classifieds_api.models.user import User, UserRole
from classifieds_api.models.listing import Listing
from classifieds_api.repositories.user import UserRepository
from classifieds_api.repositories.listing import ListingRepository
from classifieds_api.schemas.auth import CurrentUser
from classifieds_api.schemas.listing import ListingCreate
from classifieds_api.services.auth import AuthService
from classifieds_api.services.listing import ListingService
from classifieds_api.utils.auth import create_access_token


TEST_PASSWORD = "testpassword123"


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client; each request gets its own session on the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession) -> ListingService:
    return ListingService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_data(reference_id: Optional[str] = None, **overrides) -> Dict[str, Any]:
        """
        Create a valid listing payload in its public camelCase shape.
        Top-level keys in ``overrides`` replace the defaults.
        """
        payload = {
            "title": "Bright flat near the park",
            "contactEmail": "agent@example.com",
            "contactPhone": "+34 (612) 345-678",
            "offerType": "rent",
            "price": 1200,
            "currency": "EUR",
            "property": {
                "referenceId": reference_id or f"REF-{uuid.uuid4().hex[:10]}",
                "characteristics": {
                    "type": "apartment",
                    "area": 85.5,
                    "bedrooms": 2,
                    "bathrooms": 1,
                    "floor": 3,
                    "elevator": True,
                    "yearBuilt": 2010,
                    "parkingSpaces": 1,
                    "furnished": False,
                    "pool": False,
                    "garden": True,
                    "features": ["balcony", "storage"]
                },
                "location": {
                    "address": "Calle Mayor 10",
                    "city": "Madrid",
                    "state": "Madrid",
                    "zipCode": "28013",
                    "country": "Spain",
                    "coordinates": {"latitude": 40.4168, "longitude": -3.7038, "accuracy": 10}
                },
                "images": ["https://example.com/images/1.jpg", "https://example.com/images/2.jpg"]
            },
            "description": "Renovated two bedroom flat with a balcony over the park.",
            "availableFrom": "2025-03-01",
            "status": "available",
            "professional": True,
            "logo": "https://example.com/logo.png"
        }
        payload.update(copy.deepcopy(overrides))
        return payload

    @staticmethod
    async def create_listing(listing_repo: ListingRepository, **kwargs) -> Listing:
        """Create a test listing in the database."""
        data = ListingCreate.model_validate(ListingFactory.create_listing_data(**kwargs))
        return await listing_repo.create_listing(data.model_dump())


def as_current_user(user: User) -> CurrentUser:
    """Identity value the auth gate would hand to a route."""
    return CurrentUser.model_validate(user.to_dict())


def auth_headers_for(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a regular active user."""
    return await UserFactory.create_user(
        user_repository,
        email="owner@example.com",
        name="Listing Owner"
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    """Create a test admin user."""
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    """Create a test inactive user."""
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_listing(listing_repository: ListingRepository) -> Listing:
    return await ListingFactory.create_listing(listing_repository, reference_id="REF-FIXTURE-1")


@pytest.fixture
def user_headers(test_user: User) -> Dict[str, str]:
    return auth_headers_for(test_user)


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers_for(test_admin)
