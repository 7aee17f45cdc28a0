from menuforge.config import settings
from menuforge.modules.generations.designer import DesignerError

from tests.conftest import OTHER_USER_ID, SAMPLE_HTML, USER_ID

GENERATE_BODY = {
    "menu_text": "Antipasti\nBruschetta 8\nPrimi\nCacio e pepe 16",
    "colors": ["#1a1a1a", "#c9a96e"],
    "size": "a4",
    "restaurant_name": "Trattoria Giulia",
    "themes": ["fine-dining"],
}


def test_generate_returns_html_and_consumes_credit(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=3)

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 200
    body = response.json()
    assert body["html_variations"] == [SAMPLE_HTML]
    assert body["generation_id"]

    profile = fake_db.profile()
    assert profile["menu_credits"] == 2
    assert profile["total_generated"] == 1

    stored = fake_db.tables["menu_generations"]
    assert len(stored) == 1
    assert stored[0]["user_id"] == USER_ID
    assert stored[0]["html_variations"] == [SAMPLE_HTML]
    assert stored[0]["id"] == body["generation_id"]
    assert designer.requests[0].restaurant_name == "Trattoria Giulia"


def test_generate_with_zero_credits_is_forbidden(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=0)

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["needs_credits"] is True
    assert detail["needs_activation"] is False
    assert designer.requests == []


def test_generate_requires_activation(client, fake_db, designer):
    fake_db.add_profile(has_activated=False, menu_credits=5)

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["needs_activation"] is True
    assert "not activated" in detail["message"]
    assert designer.requests == []


def test_generate_without_profile_is_forbidden(client, fake_db):
    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Profile not found"


def test_generate_without_token_is_unauthorized(anonymous_client):
    response = anonymous_client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 401


def test_generate_rejects_missing_menu_text(client, fake_db):
    fake_db.add_profile(has_activated=True, menu_credits=3)
    body = {k: v for k, v in GENERATE_BODY.items() if k != "menu_text"}

    response = client.post("/api/generate", json=body)

    assert response.status_code == 422
    assert fake_db.profile()["menu_credits"] == 3


def test_generate_without_payments_skips_credits(client, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "payment_required", False)
    fake_db.add_profile(has_activated=False, menu_credits=0)

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 200
    profile = fake_db.profile()
    assert profile["menu_credits"] == 0
    assert profile["total_generated"] == 1


def test_generate_updates_existing_generation(client, fake_db):
    fake_db.add_profile(has_activated=True, menu_credits=1)
    generation = fake_db.add_generation()

    response = client.post("/api/generate", json={**GENERATE_BODY, "generation_id": generation["id"]})

    assert response.status_code == 200
    assert response.json()["generation_id"] == generation["id"]
    assert len(fake_db.tables["menu_generations"]) == 1
    assert fake_db.tables["menu_generations"][0]["html_variations"] == [SAMPLE_HTML]


def test_generate_refuses_someone_elses_generation(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=1)
    generation = fake_db.add_generation(user_id=OTHER_USER_ID)

    response = client.post("/api/generate", json={**GENERATE_BODY, "generation_id": generation["id"]})

    assert response.status_code == 403
    assert fake_db.profile()["menu_credits"] == 1
    assert designer.requests == []


def test_generate_designer_failure_is_generic_500(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=2)
    designer.error = DesignerError("overloaded")

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 500
    assert "Please try again later" in response.json()["detail"]
    # credit is consumed before the model call
    assert fake_db.profile()["menu_credits"] == 1


def test_generate_reports_provider_credit_exhaustion(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=2)
    designer.error = DesignerError("Your credit balance is too low to access the API")

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 500
    assert "API credit limits" in response.json()["detail"]


def test_generate_without_payments_creates_missing_profile(client, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "payment_required", False)

    response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 200
    profile = fake_db.profile()
    assert profile["name"] == "Giulia Rossi"
    assert profile["total_generated"] == 1
    generation_id = response.json()["generation_id"]
    assert generation_id
    assert fake_db.tables["menu_generations"][0]["user_id"] == profile["id"]


def test_generate_with_unreadable_generation_id_is_404(client, fake_db, designer):
    fake_db.add_profile(has_activated=True, menu_credits=1)
    fake_db.failing_tables.add("menu_generations")

    response = client.post("/api/generate", json={**GENERATE_BODY, "generation_id": "not-a-uuid"})

    assert response.status_code == 404
    assert fake_db.profile()["menu_credits"] == 1
    assert designer.requests == []
