# backend/catalog_service/tests/conftest.py

import logging
import os

# Must be set before the catalog modules create their engine.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_CONNECT_MAX_RETRIES"] = "1"

import pytest
from fastapi.testclient import TestClient

from catalog.db import Base, SessionLocal, engine, get_db
from catalog.main import app

# Suppress noisy logs from SQLAlchemy/FastAPI during tests for cleaner output
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
logging.getLogger("fastapi").setLevel(logging.WARNING)
logging.getLogger("catalog.main").setLevel(logging.WARNING)  # Suppress app's own info logs


# --- Pytest Fixtures ---
@pytest.fixture(scope="function")
def db_session_for_test():
    """Fresh tables per test, with the app's get_db pointed at the test session."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    try:
        yield db
    finally:
        db.close()
        app.dependency_overrides.pop(get_db, None)
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_product(client: TestClient, db_session_for_test):
    """Creates a product through the API and returns its JSON."""

    def _make(name="Basic Tee", description="Plain cotton tee", price="19.99", image=None):
        response = client.post(
            "/products",
            json={"name": name, "description": description, "price": price, "image": image},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make
