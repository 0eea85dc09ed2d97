"""
Test configuration and fixtures for task management tests.

Provides:
- Test database with SQLite in-memory for speed
- FastAPI test client with database dependency override
- Authentication helpers (JWT token generation)
- Common fixtures for users, categories and tasks
"""

import os
import sys
import logging
from datetime import timedelta
from typing import Generator, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, get_db
from main import app
import models
from auth.security import hash_password, create_access_token

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

# SQLite in-memory database for fast testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

# Hashing with Argon2 is slow; fixtures share one hash
TEST_PASSWORD_HASH = hash_password("password123")


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.

    This ensures test isolation and fast execution.
    """
    logger.debug("Creating test database")

    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        logger.debug("Test database cleaned up")


@pytest.fixture(scope="function")
def client(test_db: Session) -> TestClient:
    """
    Create FastAPI test client with database dependency override.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, name: str, email: str, role: models.UserRole = models.UserRole.member) -> models.User:
    user = models.User(name=name, email=email, password_hash=TEST_PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {email} with ID: {user.id}")
    return user


def make_task(
    db: Session,
    user: models.User,
    title: str,
    status: models.TaskStatus = models.TaskStatus.pending,
    **kwargs
) -> models.Task:
    task = models.Task(title=title, status=status, user_id=user.id, **kwargs)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def make_dependency(db: Session, blocked: models.Task, blocking: models.Task) -> models.TaskDependency:
    """Insert an edge directly, bypassing validation (fixture setup only)."""
    edge = models.TaskDependency(blocking_task_id=blocking.id, blocked_task_id=blocked.id)
    db.add(edge)
    db.commit()
    db.refresh(edge)
    return edge


@pytest.fixture(scope="function")
def admin_user(test_db: Session) -> models.User:
    """
    Create an admin user for testing.
    """
    return make_user(test_db, "Admin User", "admin@test.com", models.UserRole.admin)


@pytest.fixture(scope="function")
def regular_user(test_db: Session) -> models.User:
    """
    Create a regular member user for testing.
    """
    return make_user(test_db, "Regular User", "user@test.com", models.UserRole.member)


def create_auth_token(user: models.User, expires_delta: timedelta = None) -> str:
    """
    Helper to create JWT access token for a user.

    Args:
        user: User to create token for
        expires_delta: Optional expiration time override

    Returns:
        JWT access token string
    """
    logger.debug(f"Creating auth token for user {user.id}")
    token_data = {
        "sub": str(user.id),
        "role": user.role.value,
        "email": user.email
    }
    return create_access_token(token_data, expires_delta)


@pytest.fixture(scope="function")
def auth_headers(admin_user: models.User) -> Dict[str, str]:
    """
    Create authorization headers with admin token.
    """
    return {"Authorization": f"Bearer {create_auth_token(admin_user)}"}


@pytest.fixture(scope="function")
def user_auth_headers(regular_user: models.User) -> Dict[str, str]:
    """
    Create authorization headers for regular user.
    """
    return {"Authorization": f"Bearer {create_auth_token(regular_user)}"}
