import uuid

import pytest
from fastapi.testclient import TestClient

from lnacademy.core.config import Settings
from lnacademy.core.database import Base, build_engine, build_session_factory
from lnacademy.core.security import TokenService, get_password_hash
from lnacademy.main import create_app
from lnacademy.models.user import User
from lnacademy.repositories.product_repository import ProductRepository
from lnacademy.repositories.user_repository import UserRepository
from lnacademy.services.product_service import ProductService
from lnacademy.services.user_service import UserService

PASSWORD = "password1"


@pytest.fixture
def settings():
    # In-memory SQLite keeps every test isolated and needs no server
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    # Entering the context runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


@pytest.fixture
def user_service(db, token_service):
    return UserService(UserRepository(db), token_service)


@pytest.fixture
def product_service(db):
    return ProductService(ProductRepository(db))


@pytest.fixture
def make_user(db):
    """Insert an active user directly, skipping the signup flow."""
    def _make_user(email=None):
        user = User(
            id=uuid.uuid4(),
            email=email or f"{uuid.uuid4().hex[:8]}@academy.io",
            password=get_password_hash(PASSWORD),
        )
        return UserRepository(db).create(user)
    return _make_user


def signup_and_signin(client, email, password=PASSWORD):
    """Register through the API and return bearer headers for the new user."""
    response = client.post("/api/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    response = client.post("/api/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def owner_headers(client):
    return signup_and_signin(client, "owner@academy.io")


@pytest.fixture
def other_headers(client):
    return signup_and_signin(client, "other@academy.io")


@pytest.fixture
def auth_headers(client):
    """Factory: sign a fresh user up and return their bearer headers."""
    def _auth_headers(email):
        return signup_and_signin(client, email)
    return _auth_headers
