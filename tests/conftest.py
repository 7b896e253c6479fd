import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.database.connection import Base, get_db
from app.enums.lifecycle_states import LifecycleState
from app.main import app
from app.schemas.category import CategoryCreate
from app.schemas.product import ProductCreate
from app.services import lifecycle_service
from app.services.category_service import create_category
from app.services.product_service import create_product
from app.services.user_service import create_user

TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture()
def engine():
    # fresh database per test: services commit and roll back on their own
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _token_for(client, db, username, role):
    create_user(db, username, "secret123", role=role)
    res = client.post("/auth/login", data={"username": username, "password": "secret123"})
    return res.json()["access_token"]


@pytest.fixture()
def admin_headers(client, db):
    return {"Authorization": f"Bearer {_token_for(client, db, 'admin', 'admin')}"}


@pytest.fixture()
def staff_headers(client, db):
    return {"Authorization": f"Bearer {_token_for(client, db, 'staff', 'warehouse_staff')}"}


@pytest.fixture()
def category(db):
    return create_category(db, CategoryCreate(name="Electronics", code="ELE"))


def make_product(db, category_id=None, unit_price=100.0, sku=None, name="Test Product"):
    payload = ProductCreate(
        name=name,
        category_id=category_id,
        unit_price=unit_price,
        sku=sku,
    )
    return create_product(db, payload, created_by="tester")


def make_active_product(db, category_id, unit_price=100.0, sku=None, name="Test Product"):
    product = make_product(db, category_id=category_id, unit_price=unit_price, sku=sku, name=name)
    for state in (LifecycleState.pending_approval, LifecycleState.approved, LifecycleState.active):
        product = lifecycle_service.transition(db, product.id, state, "admin")
    return product


# fixed clock for pricing and SKU tests
NOW = datetime(2025, 6, 15, 12, 0, 0)
