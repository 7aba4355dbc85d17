"""
Shared fixtures: in-memory database, demo catalog, API client, logged-in user.
"""
import os
import sys

import pytest

# Required settings must be in place before app modules are imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add backend folder to path
backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from models.catalog import Basket, Candy, PaymentType  # noqa: E402
from populate_db import populate  # noqa: E402
import utils.pdf  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    populate(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db):
    """Names of seeded rows mapped to their ids."""
    return {
        "baskets": {b.name: b.id for b in db.query(Basket).all()},
        "candies": {c.name: c.id for c in db.query(Candy).all()},
        "payments": {p.name: p.id for p in db.query(PaymentType).all()},
    }


@pytest.fixture(autouse=True)
def receipts_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(utils.pdf, "STORAGE_DIR", tmp_path / "receipts")
    return tmp_path / "receipts"


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def auth_headers(client):
    response = client.post("/register", json={"name": "Ana López", "phone": "88887777"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
