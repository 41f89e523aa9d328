URL = "/api/v1/balance"


def test_lookup_by_admission_number(client, make_student):
    make_student(name="John Doe", admission_no="ASO/2024/001", deposit=2500)

    resp = client.get(f"{URL}/student", params={"admission_no": " ASO/2024/001 "})
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "John Doe"
    assert body["balance"] == 2500
    assert "id" not in body


def test_unknown_admission_number(client):
    resp = client.get(f"{URL}/student", params={"admission_no": "NOPE"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Student not found"


def test_blank_search_value(client):
    assert client.get(f"{URL}/student", params={"admission_no": "  "}).status_code == 400
    assert client.get(f"{URL}/class").status_code == 400


def test_lookup_by_class(client, make_student):
    make_student(name="Zainab", admission_no="1", class_code="ND1A")
    make_student(name="Abu", admission_no="2", class_code="ND1A")
    make_student(name="Other", admission_no="3", class_code="ND2A")

    rows = client.get(f"{URL}/class", params={"class_code": "ND1A"}).json()
    assert [r["name"] for r in rows] == ["Abu", "Zainab"]


def test_empty_class_is_not_an_error(client):
    resp = client.get(f"{URL}/class", params={"class_code": "HND9Z"})
    assert resp.status_code == 200
    assert resp.json() == []
