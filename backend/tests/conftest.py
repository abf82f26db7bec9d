"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("SEED_BADGES_ON_STARTUP", "false")
os.environ.setdefault("MEMBERSHIP_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gymaccess.core.clock import local_now
from gymaccess.core.rbac import MEMBER_ROLE
from gymaccess.core.security import (
    MEMBER_AUDIENCE, STAFF_AUDIENCE, create_access_token, get_password_hash,
)
from gymaccess.db.base import Base
from gymaccess.db.session import get_db
from gymaccess.main import app
# Import all models to ensure they're registered with Base.metadata
from gymaccess.models import *
from gymaccess.models.gamification import Badge, BadgeRarity
from gymaccess.models.member import Member
from gymaccess.models.membership import Membership, MembershipStatus, MembershipType
from gymaccess.models.staff import Staff, StaffRole

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable the rate limiter during tests to avoid flaky failures
    from gymaccess.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_staff(db: Session, email: str, role: StaffRole, password: str = "staffpass123") -> Staff:
    staff = Staff(
        first_name="Front",
        last_name="Desk" if role == StaffRole.STAFF else "Admin",
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        is_active=True,
    )
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


def staff_headers_for(staff: Staff) -> dict:
    token = create_access_token(
        data={"sub": str(staff.id), "email": staff.email, "role": staff.role.value},
        audience=STAFF_AUDIENCE,
    )
    return {"Authorization": f"Bearer {token}"}


def member_headers_for(member: Member) -> dict:
    token = create_access_token(
        data={"sub": str(member.id), "email": member.email, "role": MEMBER_ROLE},
        audience=MEMBER_AUDIENCE,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_staff(db_session: Session) -> Staff:
    """Create an active front-desk staff account."""
    return _make_staff(db_session, "desk@gym.test", StaffRole.STAFF)


@pytest.fixture
def test_admin(db_session: Session) -> Staff:
    """Create an active admin account."""
    return _make_staff(db_session, "admin@gym.test", StaffRole.ADMIN, password="adminpass123")


@pytest.fixture
def staff_headers(test_staff: Staff) -> dict:
    return staff_headers_for(test_staff)


@pytest.fixture
def admin_headers(test_admin: Staff) -> dict:
    return staff_headers_for(test_admin)


@pytest.fixture
def test_member(db_session: Session) -> Member:
    """Create a member with a portal password."""
    member = Member(
        username="jane_doe",
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        phone_number="+15550001",
        password_hash=get_password_hash("memberpass123"),
        qr_code="11111111-2222-4333-8444-555555555555",
    )
    db_session.add(member)
    db_session.commit()
    db_session.refresh(member)
    return member


@pytest.fixture
def member_headers(test_member: Member) -> dict:
    return member_headers_for(test_member)


@pytest.fixture
def active_membership(db_session: Session, test_member: Member) -> Membership:
    """A monthly membership valid for the next 30 days."""
    now = local_now()
    membership = Membership(
        member_id=test_member.id,
        membership_type=MembershipType.MONTHLY,
        purchase_date=now - timedelta(days=1),
        expiration_date=now + timedelta(days=30),
        status=MembershipStatus.ACTIVE,
    )
    db_session.add(membership)
    db_session.commit()
    db_session.refresh(membership)
    return membership


@pytest.fixture
def test_badge(db_session: Session) -> Badge:
    badge = Badge(
        name="Streak Master",
        description="You've maintained a 30-day streak!",
        icon_url="🔥",
        rarity=BadgeRarity.EPIC,
        point_value=500,
    )
    db_session.add(badge)
    db_session.commit()
    db_session.refresh(badge)
    return badge


@pytest.fixture
def headers_for_member():
    """Build member-audience auth headers for any member."""
    return member_headers_for


@pytest.fixture
def headers_for_staff():
    """Build staff-audience auth headers for any staff account."""
    return staff_headers_for
