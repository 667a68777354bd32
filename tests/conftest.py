import os

# Antes de importar a aplicação: o engine global não deve apontar para o Postgres
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESEND_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

import clearstock.model  # noqa: F401
from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.main import app
from clearstock.services.restaurant_service import provision_restaurant


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings():
    settings = Settings()
    settings.seed_pins = {"1111": "A", "2222": "B"}
    settings.legacy_cookie_until = None
    settings.resend_api_key = None
    settings.elevenlabs_api_key = None
    return settings


@pytest.fixture
def restaurant(session):
    """Restaurante "A" já com nome (PIN 1111 -> 001111)."""
    return provision_restaurant(session, pin="001111", label="A", name="Tasca do Zé")


@pytest.fixture
def client(engine, settings):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, restaurant):
    response = client.post("/auth/login", json={"pin": "1111"})
    assert response.status_code == 200
    return client
