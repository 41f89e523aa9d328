import pytest

from models.purchases import Purchase
from models.stock import StockItem
from models.students import Student
from models.transactions import Transaction

URL = "/api/v1/purchases"


def test_purchase_moves_stock_wallet_and_ledger_together(admin_client, make_student, make_item, db):
    student = make_student(deposit=1000)
    item = make_item(item_name="Biro", quantity=20, selling_price=150)

    resp = admin_client.post(URL, json={"student_id": student["id"], "item_id": item["id"], "quantity": 3})
    assert resp.status_code == 201
    body = resp.json()
    assert body["total_price"] == pytest.approx(450)
    assert body["item_name"] == "Biro"
    assert body["admission_no"] == student["admission_no"]

    assert db.get(StockItem, item["id"]).quantity == 17
    wallet = db.get(Student, student["id"])
    assert wallet.balance == pytest.approx(550)
    assert wallet.total_spent == pytest.approx(450)

    spend = db.query(Transaction).filter(Transaction.type == "spend").one()
    assert spend.amount == pytest.approx(450)
    assert spend.method == "credit"
    assert spend.note == "Purchase: 3 x Biro"


def test_insufficient_stock_writes_nothing(admin_client, make_student, make_item, db):
    student = make_student(deposit=10000)
    item = make_item(quantity=2, selling_price=100)

    resp = admin_client.post(URL, json={"student_id": student["id"], "item_id": item["id"], "quantity": 5})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient stock. Available: 2"

    assert db.query(Purchase).count() == 0
    assert db.get(StockItem, item["id"]).quantity == 2
    assert db.get(Student, student["id"]).balance == pytest.approx(10000)


def test_insufficient_balance_writes_nothing(admin_client, make_student, make_item, db):
    student = make_student(deposit=100)
    item = make_item(quantity=10, selling_price=60)

    resp = admin_client.post(URL, json={"student_id": student["id"], "item_id": item["id"], "quantity": 2})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient balance"

    assert db.query(Purchase).count() == 0
    assert db.query(Transaction).filter(Transaction.type == "spend").count() == 0
    assert db.get(StockItem, item["id"]).quantity == 10


def test_unknown_item_or_student(admin_client, make_student, make_item):
    student = make_student(deposit=100)
    item = make_item()
    assert admin_client.post(URL, json={"student_id": student["id"], "item_id": 999, "quantity": 1}).status_code == 404
    assert admin_client.post(URL, json={"student_id": 999, "item_id": item["id"], "quantity": 1}).status_code == 404


def test_zero_quantity_is_rejected(admin_client, make_student, make_item):
    student = make_student(deposit=100)
    item = make_item()
    resp = admin_client.post(URL, json={"student_id": student["id"], "item_id": item["id"], "quantity": 0})
    assert resp.status_code == 422


def test_list_and_search(admin_client, make_student, make_item):
    student = make_student(name="Ada", admission_no="ASO/7", deposit=1000)
    book = make_item(item_name="Exercise Book", selling_price=35)
    pen = make_item(item_name="Biro", selling_price=20)
    admin_client.post(URL, json={"student_id": student["id"], "item_id": book["id"], "quantity": 1})
    admin_client.post(URL, json={"student_id": student["id"], "item_id": pen["id"], "quantity": 2})

    rows = admin_client.get(URL).json()
    assert [r["item_name"] for r in rows] == ["Biro", "Exercise Book"]
    assert [r["item_name"] for r in admin_client.get(URL, params={"search": "exercise"}).json()] == ["Exercise Book"]
    assert len(admin_client.get(URL, params={"search": "ASO/7"}).json()) == 2
