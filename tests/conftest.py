"""
Shared test fixtures for the todo hierarchy test suite.

Every test gets a fresh in-memory SQLite database shared between the test
body and the request handlers through a StaticPool engine.
"""

import os
import sys

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_USERS"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import User, UserRole
from app.utils.security import create_access_token, get_password_hash
from main import app

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test and drop them after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Raw database session for direct service calls and assertions."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    """Insert a user directly; login_name defaults to the username."""

    def _make_user(username, role=UserRole.USER.value, manager=None, login_name="__same__"):
        user = User(
            username=username,
            login_name=username if login_name == "__same__" else login_name,
            hashed_password=PASSWORD_HASH,
            role=role,
            manager_id=manager.id if manager else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(data={"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def org(make_user):
    """super admin -> admin -> two users, plus a sibling admin with one report.

    root
    ├── boss (admin)
    │   ├── alice
    │   └── bob
    └── other (admin)
        └── carol
    """
    root = make_user("root", role=UserRole.SUPER_ADMIN.value)
    boss = make_user("boss", role=UserRole.ADMIN.value, manager=root)
    alice = make_user("alice", manager=boss)
    bob = make_user("bob", manager=boss)
    other = make_user("other", role=UserRole.ADMIN.value, manager=root)
    carol = make_user("carol", manager=other)
    return {
        "root": root,
        "boss": boss,
        "alice": alice,
        "bob": bob,
        "other": other,
        "carol": carol,
    }
