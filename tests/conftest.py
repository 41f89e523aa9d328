import os

# Must be set before config/database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BASE_PATH"] = ""

import pytest
from fastapi.testclient import TestClient

from database import Base, engine, SessionLocal
import main
from create_admin import create_admin

ADMIN_EMAIL = "admin@asostore.com"
ADMIN_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
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
    """Anonymous client, no session token."""
    return TestClient(main.app)


@pytest.fixture
def admin_client(db):
    create_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD)
    c = TestClient(main.app)
    resp = c.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    c.headers.update({"Authorization": f"Bearer {resp.json()['access_token']}"})
    return c


@pytest.fixture
def make_student(admin_client):
    def _make(name="John Doe", admission_no="ASO/2024/001", class_code="ND1A", deposit=0.0):
        resp = admin_client.post("/api/v1/students", json={
            "name": name, "admission_no": admission_no, "class_code": class_code,
        })
        assert resp.status_code == 201, resp.text
        student = resp.json()
        if deposit:
            tx = admin_client.post("/api/v1/transactions", json={
                "student_id": student["id"], "amount": deposit, "type": "deposit", "method": "cash",
            })
            assert tx.status_code == 201, tx.text
            student = admin_client.get(f"/api/v1/students/{student['id']}").json()
        return student
    return _make


@pytest.fixture
def make_item(admin_client):
    def _make(item_name="Exercise Book", quantity=10, cost_price=25.0, selling_price=35.0):
        resp = admin_client.post("/api/v1/stock", json={
            "item_name": item_name, "quantity": quantity,
            "cost_price": cost_price, "selling_price": selling_price,
        })
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make
