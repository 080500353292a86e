import pytest

from vaultguard.generator import SYMBOLS
from vaultguard.web import create_app


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def test_home(client):
    assert client.get("/").status_code == 200


def test_generate_defaults(client):
    r = client.post("/generate", json={})
    assert r.status_code == 200
    data = r.get_json()
    assert len(data["password"]) == 16
    assert data["hint"] == "Strong"


def test_generate_without_symbols(client):
    r = client.post("/generate", json={"length": 20, "symbols": False})
    pw = r.get_json()["password"]
    assert len(pw) == 20
    assert not any(c in SYMBOLS for c in pw)


def test_generate_invalid_policy(client):
    r = client.post("/generate", json={"lowercase": False, "numbers": False})
    assert r.status_code == 400
    assert "lowercase" in r.get_json()["error"].lower()


def test_score(client):
    r = client.post("/score", json={"password": "Abcdefg1!"})
    data = r.get_json()
    assert data["score"] == 70
    assert data["label"] == "strong"
    assert "password" not in data


def test_audit(client):
    records = [
        {"id": "a", "name": "A", "accountName": "u", "password": "x", "category": "application"},
        {"id": "b", "name": "B", "password": "x", "category": "device",
         "createdAt": "2020-01-01T00:00:00Z"},
    ]
    r = client.post("/audit", json={"records": records})
    assert r.status_code == 200
    data = r.get_json()
    assert data["duplicates"] == ["b"]
    assert data["old"] == ["b"]
    assert data["ageReport"]["181+ days"] == 1
    # weak 2 + old 1 + duplicate 1 over 6
    assert data["securityScore"] == 33


def test_audit_empty(client):
    data = client.post("/audit", json={"records": []}).get_json()
    assert data["securityScore"] == 0
    assert data["strengthDistribution"] == {}


def test_audit_bad_record(client):
    r = client.post("/audit", json={"records": [{"name": "no id"}]})
    assert r.status_code == 400


def test_audit_null_password_is_bad_request(client):
    records = [{"id": "a", "name": "A", "password": None, "category": "device"}]
    r = client.post("/audit", json={"records": records})
    assert r.status_code == 400


def test_audit_records_must_be_a_list(client):
    assert client.post("/audit", json={"records": {"a": 1}}).status_code == 400
    assert client.post("/audit", json={"records": ["a"]}).status_code == 400


def test_body_must_be_an_object(client):
    for route in ("/generate", "/score", "/audit"):
        r = client.post(route, json=["x"])
        assert r.status_code == 400
        assert "JSON object" in r.get_json()["error"]


def test_score_non_string_password(client):
    assert client.post("/score", json={"password": 123}).status_code == 400
