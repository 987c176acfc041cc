"""Tests for the alias store service."""

import pytest
from fastapi.testclient import TestClient

from alias_store_app import main


@pytest.fixture
def cursor(mocker):
    conn = mocker.patch("alias_store_app.main._conn").return_value.__enter__.return_value
    return conn.cursor.return_value.__enter__.return_value


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(main, "STORE_TOKEN", None)
    return TestClient(main.app)


def test_size_stats(client, cursor):
    cursor.fetchall.return_value = [{"label": "2x2", "usage_count": 3}, {"label": "4x4", "usage_count": None}]

    response = client.get("/sizes/stats")

    assert response.json() == [{"value": "2x2", "count": 3}, {"value": "4x4", "count": 0}]


def test_size_alias_upsert_strips_nul(client, cursor):
    response = client.post("/sizes/aliases", json={"aliasText": " M1\x0022 ", "mappedSize": "2x2"})

    assert response.json() == {"ok": True}
    sql, params = cursor.execute.call_args[0]
    assert "on conflict (alias_text) do update" in sql
    assert params == ("M122", "2x2")


def test_product_aliases(client, cursor):
    cursor.fetchall.return_value = [{"alias_text": "COR", "mapped_product_name": "Coretec"}]

    assert client.get("/products/aliases").json() == [{"aliasText": "COR", "mappedProductName": "Coretec"}]


def test_blank_search_skips_database(client, cursor):
    assert client.get("/products/search", params={"q": "  "}).json() == []
    cursor.execute.assert_not_called()


def test_search_escapes_wildcards(client, cursor):
    cursor.fetchall.return_value = [{"name": "50% Off Oak"}]

    assert client.get("/products/search", params={"q": "50%", "limit": 5}).json() == ["50% Off Oak"]
    _, params = cursor.execute.call_args[0]
    assert params == ("%50\\%%", "50\\%%", 5)


def test_token_is_required_when_configured(client, cursor, monkeypatch):
    monkeypatch.setattr(main, "STORE_TOKEN", "secret")

    assert client.get("/products/names").status_code == 401
    cursor.fetchall.return_value = [{"name": "Coretec"}]
    response = client.get("/products/names", headers={"x-alias-store-token": "secret"})
    assert response.json() == ["Coretec"]
