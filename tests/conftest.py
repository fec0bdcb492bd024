import os
import tempfile
from datetime import datetime
from types import SimpleNamespace

# Configure before anything under app/ reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="agrimarket-uploads-")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["AI_API_KEY"] = ""
os.environ["SUPER_ADMIN_EMAIL"] = ""
os.environ["SUPER_ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.auth import security
from app.db.session import Base, engine, SessionLocal
from app.models.user import User, Profile

# Keep password hashing cheap in tests
security.pwd_context.update(bcrypt__rounds=4)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth(user) -> dict:
    return {"Authorization": f"Bearer {user.token}"}


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(role="buyer", full_name=None, email=None, password="password"):
        counter["n"] += 1
        session = SessionLocal()
        try:
            user = User(
                email=email or f"{role}{counter['n']}@example.com",
                hashed_password=security.get_password_hash(password),
                full_name=full_name or f"{role.title()} {counter['n']}",
                role=role,
                profile=Profile(),
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return SimpleNamespace(
                id=user.id,
                email=user.email,
                role=user.role,
                full_name=user.full_name,
                password=password,
                token=security.create_user_token(user),
            )
        finally:
            session.close()

    return _make


@pytest.fixture
def farmer(make_user):
    return make_user("farmer", full_name="Fiona Farmer")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer", full_name="Ben Buyer")


@pytest.fixture
def admin(make_user):
    return make_user("admin", full_name="Ada Admin")


@pytest.fixture
def super_admin(make_user):
    return make_user("super_admin", full_name="Sam Super")


@pytest.fixture
def create_crop(client):
    def _create(owner, name="Tomatoes", quantity=10, price=50, unit="kg",
                description=None, location=None, files=None):
        data = {"name": name, "quantity": str(quantity), "unit": unit, "pricePerUnit": str(price)}
        if description is not None:
            data["description"] = description
        if location is not None:
            data["location"] = location
        response = client.post("/crops", data=data, files=files, headers=auth(owner))
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture
def place_orders(client):
    def _place(buyer, items, buyer_contact=None):
        response = client.post("/orders", json={
            "buyer_id": buyer.id,
            "buyer_contact": buyer_contact,
            "items": [{"crop_id": crop_id, "quantity": quantity} for crop_id, quantity in items],
        })
        assert response.status_code == 200, response.text
        return response.json()["created"]

    return _place


STALE = datetime(2020, 1, 1)


def backdate(model, row_id):
    """Push a row's updated_at into the past so a later bump is visible."""
    with SessionLocal() as session:
        session.query(model).filter(model.id == row_id).update({model.updated_at: STALE})
        session.commit()
