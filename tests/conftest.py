"""
Shared fixtures.

The environment is pointed at a throwaway directory before anything under
``app`` is imported, because settings, the engine and the upload mount are
all built at import time.
"""
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="bongo-express-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SMTP_HOST"] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.base import Base, SessionLocal, engine
from app.models.payment import Payment
from app.models.shipment import Shipment, shipment_cost
from app.models.user import ROLE_ADMIN, ROLE_AGENT, ROLE_CUSTOMER
from app.services import auth_service

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=ROLE_CUSTOMER, name=None, email=None, password=PASSWORD, **fields):
        counter["n"] += 1
        n = counter["n"]
        return auth_service.create_user(
            db,
            name or f"{role.title()} {n}",
            email or f"{role}{n}@example.com",
            password,
            role=role,
            **fields,
        )

    return _make


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {auth_service.create_access_token(user.id)}"}


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_ADMIN, name="Admin", email="admin@bongoexpress.com")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def customer(make_user):
    return make_user(ROLE_CUSTOMER, name="Jane Wanjiku", email="jane@example.com")


@pytest.fixture
def customer_headers(customer):
    return bearer(customer)


@pytest.fixture
def agent(make_user):
    return make_user(ROLE_AGENT, name="Otieno Agent", email="otieno@bongoexpress.com", location="Nairobi")


@pytest.fixture
def make_shipment(db):
    """Insert a shipment directly; ``created_at`` etc. can be forced for aggregation tests."""

    def _make(customer, origin="Nairobi", destination="Mombasa", weight=10.0, agent=None, **fields):
        shipment = Shipment(
            customer_id=customer.id,
            agent_id=agent.id if agent else None,
            origin=origin,
            destination=destination,
            weight=weight,
            cost=shipment_cost(weight),
            tracking_history=[],
            **fields,
        )
        db.add(shipment)
        db.commit()
        db.refresh(shipment)
        return shipment

    return _make


@pytest.fixture
def make_payment(db):
    def _make(shipment, amount=None, method="M-Pesa", **fields):
        payment = Payment(
            shipment_id=shipment.id,
            customer_id=shipment.customer_id,
            amount=shipment.cost if amount is None else amount,
            method=method,
            **fields,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    return _make


@pytest.fixture
def auth_for():
    """``auth_for(user)`` -> Authorization header dict"""
    return bearer
