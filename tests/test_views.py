from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

import review
from app import create_app
from tests.conftest import login

HTML = {"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
PAYLOAD = "<script>alert(1)</script>"


def publish(app, name, description):
    db = app.state.session_factory()
    try:
        review.approve(db, review.submit(db, name, description, 5).id)
    finally:
        db.close()


def test_index_renders_products(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Wireless Headphones" in resp.text
    assert "Price: $19.99" in resp.text
    assert "window.SERVER_RENDERED=true" in resp.text
    assert "IS_REVIEW_QUEUE" not in resp.text


def test_lab_mode_renders_catalog_text_verbatim(app, client):
    publish(app, PAYLOAD, "<img src=x onerror=alert(2)>")

    text = client.get("/").text
    assert PAYLOAD in text
    assert "<img src=x onerror=alert(2)>" in text


def test_escape_mode_escapes_catalog_text(tmp_path, settings):
    hardened = replace(
        settings,
        database_url=f"sqlite:///{tmp_path / 'hardened.db'}",
        escape_html=True,
    )
    app = create_app(hardened)
    publish(app, PAYLOAD, "plain")

    with TestClient(app) as client:
        text = client.get("/").text
    assert PAYLOAD not in text
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in text


def test_search_page_lists_everything_without_term(client):
    text = client.get("/home-new.html").text

    assert "You are searching for" not in text
    for name in ("Wireless Headphones", "Smart Watch", "Bluetooth Speaker", "USB-C Cable"):
        assert name in text


def test_search_page_filters_and_echoes_term(client):
    text = client.get("/home-new.html", params={"search": "cable"}).text

    assert "You are searching for: cable" in text
    assert "USB-C Cable" in text
    assert "Smart Watch" not in text


def test_search_banner_reflects_markup_in_lab_mode(client):
    text = client.get("/home-new.html", params={"search": PAYLOAD}).text
    assert f"You are searching for: {PAYLOAD}" in text


def test_admin_queue_for_admin(client):
    client.post(
        "/api/products/pending",
        json={"name": "Queued Gadget", "description": "waiting", "price": 3},
    )
    login(client, "admin", "admin123")

    resp = client.get("/admin/queue", headers=HTML)
    assert resp.status_code == 200
    assert "Admin Review Queue" in resp.text
    assert "window.IS_REVIEW_QUEUE=true" in resp.text
    assert "Queued Gadget" in resp.text
    assert "approvePending(" in resp.text
    assert "Wireless Headphones" not in resp.text


@pytest.mark.parametrize("username, password", [("demo", "demo123"), ("user1", "password123")])
def test_admin_queue_forbidden_for_other_users(client, username, password):
    login(client, username, password)

    resp = client.get("/admin/queue", headers=HTML)
    assert resp.status_code == 403
    assert resp.text == "Admin access required"

    resp = client.get("/admin/queue")
    assert resp.status_code == 403
    assert resp.json() == {"message": "Admin privileges required"}


def test_admin_queue_redirects_anonymous_browser(client):
    resp = client.get("/admin/queue", headers=HTML, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard", headers=HTML, follow_redirects=False)
    assert resp.status_code == 302

    login(client, "demo", "demo123")
    resp = client.get("/dashboard", headers=HTML)
    assert resp.status_code == 200
    assert "Welcome, demo" in resp.text


def test_dashboard_file_is_blocked(client):
    login(client, "admin", "admin123")

    resp = client.get("/dashboard.html")
    assert resp.status_code == 403
    assert resp.text == "Access denied. Please login first."


def test_login_page_and_static_assets(client):
    assert client.get("/login").status_code == 200

    resp = client.get("/static/product-operations.js")
    assert resp.status_code == 200
    assert "approvePending" in resp.text
