"""
Shared fixtures.

Every test gets its own in-memory SQLite database (StaticPool so the app and
the test share one connection), a fresh OTP store and a console email
transport whose outbox tests can inspect.
"""

import os

# Must be set before app modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESEND_API_KEY"] = ""
os.environ["OTP_BACKEND"] = "memory"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_TIMEZONE"] = "America/Vancouver"

from datetime import date
from typing import Dict, Generator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies.services import get_email_service, get_otp_store
from app.auth import create_access_token, get_password_hash
from app.core.constants import DAYS_OF_WEEK
from app.database import Base, get_db
from app.main import app
from app.models.availability import GlobalAvailability
from app.models.instructor import Instructor
from app.models.user import User, UserRole
from app.services.email import EmailService
from app.services.email_console import ConsoleEmailService
from app.services.otp_store import InMemoryOTPStore

TEST_PASSWORD = "Password123"

# A Monday well in the future
LESSON_DATE = date(2030, 1, 7)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def console_email() -> ConsoleEmailService:
    return ConsoleEmailService()


@pytest.fixture
def email_service(console_email) -> EmailService:
    return EmailService(console=console_email)


@pytest.fixture
def otp_store() -> InMemoryOTPStore:
    return InMemoryOTPStore()


@pytest.fixture
def client(db, email_service, otp_store) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db: Session, email: str, role: str, first_name: str, last_name: str) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role,
        email_verified=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def student(db) -> User:
    return _make_user(db, "student@example.com", UserRole.STUDENT.value, "Sam", "Student")


@pytest.fixture
def other_student(db) -> User:
    return _make_user(db, "other@example.com", UserRole.STUDENT.value, "Olive", "Other")


@pytest.fixture
def admin(db) -> User:
    return _make_user(db, "admin@example.com", UserRole.ADMIN.value, "Ada", "Admin")


@pytest.fixture
def instructor(db) -> Instructor:
    user = _make_user(db, "instructor@example.com", UserRole.INSTRUCTOR.value, "Ivan", "Castro")
    profile = Instructor(
        user_id=user.id,
        locations=["Vancouver", "North Vancouver", "Burnaby", "Surrey"],
        class_types=["class 5", "class 7"],
    )
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def weekly_hours(db):
    """08:00-20:00 every day of the week."""
    rows = [GlobalAvailability(day=day, start_time="08:00", end_time="20:00") for day in DAYS_OF_WEEK]
    db.add_all(rows)
    db.commit()
    return rows


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def lesson_date() -> date:
    return LESSON_DATE


@pytest.fixture
def student_headers(student) -> Dict[str, str]:
    return auth_headers(student)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return auth_headers(admin)
