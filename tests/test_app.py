from menuforge.config import settings


def test_credits_creates_missing_profile(client, fake_db):
    response = client.get("/api/credits")

    assert response.status_code == 200
    assert response.json() == {
        "has_activated": False,
        "menu_credits": 0,
        "total_generated": 0,
        "payment_required": True,
    }
    assert len(fake_db.tables["profiles"]) == 1


def test_credits_reports_balance(client, fake_db):
    fake_db.add_profile(has_activated=True, menu_credits=8, total_generated=3)

    body = client.get("/api/credits").json()

    assert body["menu_credits"] == 8
    assert body["total_generated"] == 3


def test_credits_defaults_when_profile_store_fails(client, fake_db):
    fake_db.failing_tables.add("profiles")

    response = client.get("/api/credits")

    assert response.status_code == 200
    assert response.json()["menu_credits"] == 0


def test_public_config(anonymous_client, monkeypatch):
    monkeypatch.setattr(settings, "activation_price_cents", 1500)

    response = anonymous_client.get("/api/config")

    assert response.json() == {"payment_required": True, "activation_price": 15.0, "credit_price": 1.0}


def test_style_catalog(anonymous_client):
    body = anonymous_client.get("/api/styles").json()

    assert {"value": "a4", "label": "A4", "dimensions": "210mm x 297mm"} in body["sizes"]
    assert "fine-dining" in [t["value"] for t in body["themes"]]
    assert len(body["layouts"]) == 3


def test_health_sets_security_headers(anonymous_client):
    response = anonymous_client.get("/health")

    assert response.json() == {"status": "healthy"}
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"


def test_unknown_route_is_404(anonymous_client):
    assert anonymous_client.get("/api/nope").status_code == 404
