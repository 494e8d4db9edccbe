import os
import pytest
from uuid import uuid4
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Tables are created per test below, not by the app's startup hook
os.environ.setdefault("CATALOG_INIT_DB", "false")

from catalog.database import Base, Database, get_database
from catalog.main import app
from catalog.utils.security import create_access_token
import catalog.models  # noqa: F401

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def db(db_session):
    """Database capability bound to the test engine."""
    return Database(TestingSessionLocal)


@pytest.fixture
def client(db):
    """FastAPI test client with the database dependency overridden."""
    app.dependency_overrides[get_database] = lambda: db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_database, None)


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def auth_headers(user_id):
    token = create_access_token({"user_id": str(user_id)})
    return {"Authorization": f"Bearer {token}"}
