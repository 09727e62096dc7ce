from dataclasses import replace

import pytest

import catalog
from errors import NotFound


def test_list_products_returns_seeded_catalog(client):
    resp = client.get("/api/products")

    assert resp.status_code == 200
    products = resp.json()
    assert len(products) == 4
    assert [p["name"] for p in products] == [
        "Wireless Headphones",
        "Smart Watch",
        "Bluetooth Speaker",
        "USB-C Cable",
    ]
    assert set(products[0]) == {"id", "name", "description", "price"}


def test_search_without_term_is_empty(client):
    assert client.get("/api/products/search").json() == []
    assert client.get("/api/products/search", params={"q": ""}).json() == []


def test_search_matches_name_substring(client):
    names = [p["name"] for p in client.get("/api/products/search", params={"q": "Watch"}).json()]
    assert names == ["Smart Watch"]


def test_search_is_case_insensitive_and_covers_description(client):
    names = [p["name"] for p in client.get("/api/products/search", params={"q": "BATTERY"}).json()]
    assert names == ["Bluetooth Speaker"]


def test_search_with_unknown_term(client):
    assert client.get("/api/products/search", params={"q": "zqxv-not-here"}).json() == []


def test_search_term_is_not_sql(client):
    resp = client.get("/api/products/search", params={"q": "' OR 1=1 --"})
    assert resp.status_code == 200
    assert resp.json() == []


def test_delete_product_scenario(client):
    resp = client.delete("/api/products/1")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Product deleted successfully"}

    products = client.get("/api/products").json()
    assert len(products) == 3
    assert all(p["id"] != 1 for p in products)


def test_delete_missing_product(client):
    resp = client.delete("/api/products/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}


def test_delete_is_parameterised_by_default(client):
    resp = client.delete("/api/products/1 OR 1=1")

    assert resp.status_code == 404
    assert len(client.get("/api/products").json()) == 4


def test_unsafe_delete_mode_is_injectable(db, settings):
    lab = replace(settings, unsafe_delete_sql=True)

    catalog.delete_product(db, lab, "1 OR 1=1")

    assert catalog.list_products(db) == []


def test_delete_service_raises_not_found(db, settings):
    with pytest.raises(NotFound):
        catalog.delete_product(db, settings, "42")
    with pytest.raises(NotFound):
        catalog.delete_product(db, settings, "abc")
