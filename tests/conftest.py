"""Pytest configuration and fixtures."""

import os
import tempfile

# Must be set before the app is imported: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="blog-feed-uploads-")
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.storage import LocalStorage, get_storage
from app.db.base import Base
from app.db.session import get_db
from app.main import app


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: str = None, email: str = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create the schema once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db():
    """Fresh session per test, with all rows removed afterwards."""
    session = TestingSessionLocal()

    yield session

    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def storage(tmp_path):
    return LocalStorage(directory=str(tmp_path), base_url="http://testserver/static")


@pytest.fixture(scope="function")
def client(db, storage):
    """Test client with database and storage overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user, log in, and return auth headers with user info."""

    def _register(email="a@x.com", name="A", password="secret") -> AuthHeaders:
        response = client.post(
            "/api/v1/auth/register",
            json={"email": email, "name": name, "password": password},
        )
        assert response.status_code == 201, response.text
        response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        data = response.json()
        return AuthHeaders({"Authorization": f"Bearer {data['token']}"}, user_id=data["user_id"], email=email)

    return _register


@pytest.fixture
def auth_headers(register):
    return register()


@pytest.fixture
def other_headers(register):
    """A second, unrelated user."""
    return register(email="b@x.com", name="B", password="another")
