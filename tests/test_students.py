def test_create_and_fetch_student(admin_client):
    resp = admin_client.post("/api/v1/students", json={
        "name": "  Jane Smith ", "admission_no": "ASO/2024/002", "class_code": "ND1B",
    })
    assert resp.status_code == 201
    student = resp.json()
    assert student["name"] == "Jane Smith"
    assert student["balance"] == 0
    assert student["last_payment"] is None

    fetched = admin_client.get(f"/api/v1/students/{student['id']}").json()
    assert fetched["admission_no"] == "ASO/2024/002"


def test_blank_fields_are_rejected(admin_client):
    resp = admin_client.post("/api/v1/students", json={
        "name": "   ", "admission_no": "ASO/1", "class_code": "ND1A",
    })
    assert resp.status_code == 400


def test_duplicate_admission_number(admin_client, make_student):
    make_student(admission_no="ASO/2024/001")
    resp = admin_client.post("/api/v1/students", json={
        "name": "Someone Else", "admission_no": "ASO/2024/001", "class_code": "ND1A",
    })
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Admission number already exists"


def test_update_student(admin_client, make_student):
    student = make_student()
    resp = admin_client.put(f"/api/v1/students/{student['id']}", json={
        "name": "John Updated", "admission_no": "ASO/2024/009", "class_code": "HND1A",
    })
    assert resp.status_code == 200
    assert resp.json()["class_code"] == "HND1A"


def test_update_to_taken_admission_number(admin_client, make_student):
    make_student(admission_no="A1")
    other = make_student(name="B", admission_no="B1")
    resp = admin_client.put(f"/api/v1/students/{other['id']}", json={
        "name": "B", "admission_no": "A1", "class_code": "ND1A",
    })
    assert resp.status_code == 409


def test_missing_student_is_404(admin_client):
    assert admin_client.get("/api/v1/students/999").status_code == 404
    assert admin_client.delete("/api/v1/students/999").status_code == 404


def test_search_and_class_filter(admin_client, make_student):
    make_student(name="Zara Ahmed", admission_no="ASO/1", class_code="ND1A")
    make_student(name="Ali Musa", admission_no="ASO/2", class_code="ND1B")
    make_student(name="Bola Ade", admission_no="XYZ/3", class_code="ND1A")

    names = [s["name"] for s in admin_client.get("/api/v1/students").json()]
    assert names == ["Ali Musa", "Bola Ade", "Zara Ahmed"]

    by_class = admin_client.get("/api/v1/students", params={"class_code": "ND1A"}).json()
    assert {s["name"] for s in by_class} == {"Zara Ahmed", "Bola Ade"}

    by_search = admin_client.get("/api/v1/students", params={"search": "aso/"}).json()
    assert {s["admission_no"] for s in by_search} == {"ASO/1", "ASO/2"}

    by_name = admin_client.get("/api/v1/students", params={"search": "musa"}).json()
    assert [s["name"] for s in by_name] == ["Ali Musa"]


def test_class_codes_are_distinct_and_sorted(admin_client, make_student):
    make_student(admission_no="1", class_code="ND1B")
    make_student(admission_no="2", class_code="ND1A")
    make_student(admission_no="3", class_code="ND1B")
    assert admin_client.get("/api/v1/students/classes").json() == ["ND1A", "ND1B"]


def test_delete_cascades_to_transactions(admin_client, make_student, db):
    from models.transactions import Transaction

    student = make_student(deposit=500)
    assert db.query(Transaction).count() == 1

    resp = admin_client.delete(f"/api/v1/students/{student['id']}")
    assert resp.status_code == 200
    assert db.query(Transaction).count() == 0


def test_transaction_history_newest_first(admin_client, make_student):
    student = make_student(deposit=100)
    admin_client.post("/api/v1/transactions", json={
        "student_id": student["id"], "amount": 30, "type": "spend", "method": "cash", "note": "lunch",
    })
    history = admin_client.get(f"/api/v1/students/{student['id']}/transactions").json()
    assert [t["type"] for t in history] == ["spend", "deposit"]
    assert history[0]["note"] == "lunch"


def test_delete_cascades_to_purchases(admin_client, make_student, make_item, db):
    from models.purchases import Purchase
    from models.stock import StockItem

    student = make_student(deposit=500)
    item = make_item(quantity=10, selling_price=35)
    admin_client.post("/api/v1/purchases", json={"student_id": student["id"], "item_id": item["id"], "quantity": 2})
    assert db.query(Purchase).count() == 1

    assert admin_client.delete(f"/api/v1/students/{student['id']}").status_code == 200
    assert db.query(Purchase).count() == 0
    # the stock item itself survives
    assert db.get(StockItem, item["id"]).quantity == 8
