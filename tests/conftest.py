"""Pytest fixtures for storefront tests."""

import os

# Settings are read at import time, so point them at a throwaway database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine, init_db
from models.users import User
from services.catalog import create_product
from services.storage import InMemoryStorage
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

PASSWORD = "Secret123"
_password_hash = None


def _hash():
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


@pytest.fixture
def db():
    """Fresh schema and a session for each test."""
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(db, storage):
    from main import app

    app.state.storage = storage
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(email="customer@example.com", role="customer"):
        user = User(email=email, password_hash=_hash(), role=role, first_name="Test", last_name="User")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role="admin")


def auth_headers(user):
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_product(db):
    def _make(name="Wireless Headphones", price=100, stock=5, category="Electronics", image="headphones.png"):
        return create_product(db, {"name": name, "price": price, "stock": stock,
                                   "category": category, "image": image})

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def order_data():
    """A valid checkout payload: one line of 2 x 100.00."""
    return {
        "lines": [
            {"product_id": 1, "name": "Wireless Headphones", "price": 100, "quantity": 2, "image": "headphones.png"},
        ],
        "shipping_address": {
            "first_name": "Asha",
            "last_name": "Rao",
            "email": "asha@example.com",
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "postal_code": "560001",
            "country": "India",
        },
        "payment_method": "card",
        "notes": "Leave at the door",
    }
