# tests/conftest.py
import os
from datetime import datetime, timedelta, timezone

# Keep tests independent of any local .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vendoriq.api.deps import get_otp_manager
from vendoriq.core.security import create_user_token, get_password_hash
from vendoriq.db.base_class import Base
from vendoriq.db.session import get_db
from vendoriq.main import app
from vendoriq.models.form_field import FormField
from vendoriq.models.industry import Category, Industry
from vendoriq.models.user import User
from vendoriq.services.otp_service import OTPManager
from vendoriq.services.otp_store import FallbackPasscodeStore, MemoryPasscodeStore

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Controllable replacement for utcnow()"""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class StubRedis:
    """Stands in for a redis-py client; flip ``down`` to simulate an outage."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.down = False

    def _check(self):
        if self.down:
            raise redis.exceptions.ConnectionError("Connection refused")

    def ping(self):
        self._check()
        return True

    def setex(self, key, seconds, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = seconds
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    def exists(self, key):
        self._check()
        return int(key in self.data)

    def close(self):
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_redis():
    return StubRedis()


@pytest.fixture
def otp_manager(clock):
    """Isolated manager backed only by process memory"""
    manager = OTPManager(FallbackPasscodeStore(None, MemoryPasscodeStore(clock)), clock=clock)
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)

    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session, otp_manager):
    """Test client wired to the test session and the isolated OTP manager."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_manager] = lambda: otp_manager
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session):
    """A verified business still inside its trial period."""
    user = User(
        business_name="Sharma Caterers",
        contact_person="Anita Sharma",
        phone="+919876543210",
        email="anita@sharmacaterers.in",
        location="Pune",
        industries=["events"],
        hashed_password=get_password_hash("password123"),
        is_verified=True,
        trial_ends_at=datetime.utcnow() + timedelta(days=30),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    """Generate authentication headers for tests."""
    return {"Authorization": f"Bearer {create_user_token(test_user)}"}


@pytest.fixture
def catering_category(db_session):
    """Events > Catering with a small custom form."""
    industry = Industry(name="Events", slug="events", sort_order=1)
    category = Category(name="Catering", slug="catering", industry=industry)
    category.form_fields = [
        FormField(
            field_name="guest_count",
            field_label="Guest Count",
            field_type="number",
            is_required=True,
            validation_rules={"min": 10, "max": 1000},
            sort_order=1,
        ),
        FormField(
            field_name="cuisine",
            field_label="Cuisine",
            field_type="select",
            is_required=True,
            options=["veg", "non-veg", "jain"],
            sort_order=2,
        ),
        FormField(
            field_name="event_date",
            field_label="Event Date",
            field_type="date",
            sort_order=3,
        ),
        FormField(
            field_name="notes",
            field_label="Notes",
            field_type="textarea",
            validation_rules={"maxLength": 20},
            sort_order=4,
        ),
        FormField(
            field_name="legacy_code",
            field_label="Legacy Code",
            field_type="text",
            is_active=False,
            sort_order=5,
        ),
    ]
    db_session.add(industry)
    db_session.commit()
    db_session.refresh(category)
    return category
