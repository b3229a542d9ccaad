"""
Test configuration and fixtures for the real estate listing API.
Provides an in-memory database per test, HTTP client, data factories and
common test utilities.
"""

import os
import shutil
import tempfile

# Settings are cached on first import, so the test environment goes first
TEST_UPLOAD_DIR = tempfile.mkdtemp(prefix="estate-api-uploads-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["UPLOAD_DIR"] = TEST_UPLOAD_DIR

import io
import uuid
from datetime import date, time, timedelta
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from estate_api.main import app
from estate_api.config import get_settings
from estate_api.database import Base, get_db
from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.schedule import Schedule, ScheduleStatus
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.schedule import ScheduleRepository
from estate_api.services.auth import AuthService
from estate_api.services.property import PropertyService
from estate_api.services.schedule import ScheduleService
from estate_api.services.user import UserService
from estate_api.utils.file_utils import FileStorage

import estate_api.models  # noqa: F401

TEST_PASSWORD = "testpassword123"


@pytest.fixture(scope="session", autouse=True)
def cleanup_upload_dir():
    yield
    shutil.rmtree(TEST_UPLOAD_DIR, ignore_errors=True)


@pytest.fixture
async def db_engine():
    """Fresh in-memory schema for every test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def schedule_repository(db_session: AsyncSession) -> ScheduleRepository:
    return ScheduleRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession, settings) -> AuthService:
    return AuthService(db_session, settings=settings)


@pytest.fixture
def property_service(db_session: AsyncSession, settings) -> PropertyService:
    return PropertyService(db_session, settings=settings)


@pytest.fixture
def schedule_service(db_session: AsyncSession, settings) -> ScheduleService:
    return ScheduleService(db_session, settings=settings)


@pytest.fixture
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest.fixture
def file_storage(settings) -> FileStorage:
    return FileStorage(settings)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = TEST_PASSWORD,
        full_name: str = "Test User",
        role: UserRole = UserRole.USER,
        phone: Optional[str] = None,
        is_active: bool = True
    ) -> dict:
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "phone": phone,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        title: str = "Test Property",
        description: str = "A bright test property close to downtown",
        property_type: PropertyType = PropertyType.APARTMENT,
        listing_type: ListingType = ListingType.SALE,
        price: Decimal = Decimal("250000.00"),
        address: str = "1 Test Street",
        city: str = "Springfield",
        state: str = "IL",
        bedrooms: int = 2,
        bathrooms: int = 1,
        area_sqft: int = 900,
        featured: bool = False,
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        agent_id: Optional[uuid.UUID] = None
    ) -> dict:
        return {
            "title": title,
            "description": description,
            "property_type": property_type,
            "listing_type": listing_type,
            "price": price,
            "address": address,
            "city": city,
            "state": state,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area_sqft": area_sqft,
            "featured": featured,
            "status": status,
            "agent_id": agent_id
        }

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        images: Optional[List[str]] = None,
        **kwargs
    ) -> Property:
        """Create a test property (and its images) in the database."""
        return await property_repo.create_with_images(
            PropertyFactory.create_property_data(**kwargs),
            images or []
        )

    @staticmethod
    def create_payload(**overrides) -> dict:
        """JSON body for POST /api/properties."""
        payload = {
            "title": "Downtown Condo",
            "description": "Two bedroom condo with a river view",
            "property_type": "condo",
            "listing_type": "sale",
            "price": 300000,
            "address": "100 Congress Ave",
            "city": "Austin",
            "state": "TX",
            "bedrooms": 2,
            "bathrooms": 2,
            "area_sqft": 1100
        }
        payload.update(overrides)
        return payload


class ScheduleFactory:
    """Factory for creating viewing requests."""

    @staticmethod
    async def create_schedule(
        schedule_repo: ScheduleRepository,
        property_obj: Property,
        requester: User,
        visit_date: date = None,
        visit_time: time = time(14, 30),
        status: ScheduleStatus = ScheduleStatus.PENDING,
        message: Optional[str] = None
    ) -> Schedule:
        return await schedule_repo.create({
            "property_id": property_obj.id,
            "user_id": requester.id,
            "agent_id": property_obj.agent_id,
            "visit_date": visit_date or date.today() + timedelta(days=7),
            "visit_time": visit_time,
            "message": message,
            "status": status
        })


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="buyer@example.com",
        full_name="Test Buyer",
        role=UserRole.USER
    )


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent@example.com",
        full_name="Test Agent",
        phone="+1-512-555-0100",
        role=UserRole.AGENT
    )


@pytest.fixture
async def other_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other.agent@example.com",
        full_name="Other Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        full_name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        full_name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        agent_id=test_agent.id,
        title="Test Property",
        images=["/uploads/properties/first.jpg", "/uploads/properties/second.jpg"]
    )


@pytest.fixture
async def agentless_property(property_repository: PropertyRepository) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        title="Orphan Listing",
        agent_id=None
    )


# Utility functions for tests
def auth_headers(user: User) -> Dict[str, str]:
    """Authorization header carrying a fresh token for ``user``."""
    token = AuthService(settings=get_settings()).create_token(user)
    return {"Authorization": f"Bearer {token}"}


def make_image_bytes(fmt: str = "JPEG", size=(200, 150), color=(200, 80, 40)) -> bytes:
    """Encode a solid-colour image with Pillow."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()
