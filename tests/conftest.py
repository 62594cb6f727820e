"""Test configuration and fixtures."""

from decimal import Decimal
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from travel_booking.core.config import Settings
from travel_booking.core.database import Database, get_db
from travel_booking.core.dependencies import get_notifier
from travel_booking.core.security import create_access_token
from travel_booking.models import PackageStatus
from travel_booking.schemas.booking import BookingDetail
from travel_booking.services.admin_service import AdminService
from travel_booking.services.notification_service import BookingNotifier
from travel_booking.services.package_service import PackageService
from travel_booking.services.traveler_service import TravelerService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_PASSWORD = "Admin#Pass123"


class RecordingNotifier(BookingNotifier):
    """Notifier double that records confirmations and can be told to fail."""

    def __init__(self):
        self.sent: list[tuple[BookingDetail, str, Optional[str]]] = []
        self.fail = False

    async def send_booking_confirmation(self, booking, traveler_email, password=None):
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.sent.append((booking, traveler_email, password))


@pytest.fixture
def test_settings():
    return Settings(database_url=TEST_DATABASE_URL, environment="development", smtp_host="")


@pytest_asyncio.fixture(scope="function")
async def test_database():
    """Create a fresh in-memory database with all tables."""
    database = Database(TEST_DATABASE_URL)
    await database.create_all()

    yield database

    await database.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_database):
    """Create a test database session."""
    async with test_database.session() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_settings, test_database, test_session, notifier):
    """Create the application wired to the test database and notifier."""
    from travel_booking.main import create_app

    app = create_app(app_settings=test_settings, database=test_database)

    # Share the test session so fixtures and requests see the same data
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin(test_session):
    admin = await AdminService(test_session).create(
        email="admin@trustyou-go.com", password=ADMIN_PASSWORD, name="Ops Admin"
    )
    await test_session.commit()
    return admin


@pytest.fixture
def admin_headers(admin):
    token = create_access_token(
        subject=str(admin.admin_id), role="admin", email=admin.email, name=admin.name
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def traveler_headers():
    """Build bearer headers for a traveler."""

    def build(traveler_id, email="traveler@example.com", name="Traveler") -> dict:
        token = create_access_token(subject=str(traveler_id), role="traveler", email=email, name=name)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest_asyncio.fixture
async def published_package(test_session, admin):
    package = await PackageService(test_session).create_package(
        title="Hill Country Escape",
        no_of_days=5,
        description="Tea estates and waterfalls",
        base_price=Decimal("120000.00"),
        status=PackageStatus.PUBLISHED,
        created_by=admin.admin_id,
    )
    await test_session.commit()
    return package


@pytest_asyncio.fixture
async def draft_package(test_session, admin):
    package = await PackageService(test_session).create_package(
        title="Southern Coast Draft",
        no_of_days=3,
        status=PackageStatus.DRAFT,
        created_by=admin.admin_id,
    )
    await test_session.commit()
    return package


@pytest_asyncio.fixture
async def active_traveler(test_session):
    traveler = await TravelerService(test_session).create(
        email="returning@example.com",
        password="Returning#1",
        name="Returning Traveler",
        contact="+94 77 000 0000",
        is_active=True,
    )
    await test_session.commit()
    return traveler


@pytest.fixture
def sample_submission(published_package):
    """Sample booking submission payload."""
    return {
        "package_id": str(published_package.package_id),
        "traveler": {
            "name": "Asha Perera",
            "email": "asha@example.com",
            "contact": "+94 71 123 4567",
        },
        "no_of_travelers": 2,
        "start_date": "2026-12-01",
        "end_date": "2026-12-05",
        "traveler_notes": "Vegetarian meals please",
    }
