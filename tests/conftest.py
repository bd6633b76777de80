"""Fixtures y configuración compartida de Pytest.

Every test runs against a fresh in-memory SQLite schema. The application's
``get_db`` dependency is overridden so that requests and direct DB fixtures
share the same connection (``StaticPool``).
"""

import os

# The settings singleton reads the environment on first import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: F401,E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def _schema():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Direct session for arranging rows the API cannot produce."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Unauthenticated client (lifespan not started: the schema comes from ``_schema``)."""
    return TestClient(app)


@pytest.fixture
def auth_client(client):
    """Client carrying a Bearer token obtained through register + login."""
    client.post(
        "/api/auth/register",
        json={"email": "tester@obra.pe", "password": "secret123", "name": "Tester"},
    )
    resp = client.post(
        "/api/auth/login",
        data={"username": "tester@obra.pe", "password": "secret123"},
    )
    assert resp.status_code == 200, resp.text
    client.headers.update({"Authorization": f"Bearer {resp.json()['access_token']}"})
    return client


# -------- Helpers de creación --------


@pytest.fixture
def make_category(auth_client):
    def _make(name="Albañilería", default_margin=25, **extra):
        resp = auth_client.post(
            "/api/categories",
            json={"name": name, "default_margin": default_margin, **extra},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_resource(auth_client):
    def _make(name="Cemento", type="material", unit="bolsa", price=10, **extra):
        resp = auth_client.post(
            "/api/resources",
            json={"name": name, "type": type, "unit": unit, "price": price, **extra},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_composite(auth_client):
    def _make(category_id, composition, name="Muro m2", unit="m2", **extra):
        resp = auth_client.post(
            "/api/composite-items",
            json={
                "name": name,
                "unit": unit,
                "category_id": category_id,
                "composition": composition,
                **extra,
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_client(auth_client):
    def _make(name="Inmobiliaria Los Andes", **extra):
        resp = auth_client.post("/api/clients", json={"name": name, **extra})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
