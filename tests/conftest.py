import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from menuforge.config import settings
from menuforge.core.dependencies import get_current_user
from menuforge.database.supabase_client import get_supabase_admin
from menuforge.main import app
from menuforge.modules.auth.service import clear_auth_cache
from menuforge.modules.billing.service import clear_product_cache
from menuforge.modules.generations.routes import get_menu_designer

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
SAMPLE_HTML = "<!DOCTYPE html><html><body><h1>Trattoria</h1></body></html>"


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the postgrest query builder for the services under test."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.rows = db.tables.setdefault(table, [])
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_n = None

    def select(self, *_args):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row):
        return all(row.get(col) == val for col, val in self.filters)

    def execute(self):
        if self.table in self.db.failing_tables:
            raise RuntimeError(f"simulated failure on {self.table}")
        self.db.calls.append((self.table, self.op, self.payload, list(self.filters)))

        if self.op == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self.db.next_timestamp())
            self.rows.append(row)
            return FakeResult([copy.deepcopy(row)])

        matched = [row for row in self.rows if self._matches(row)]
        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
        elif self.op == "delete":
            for row in matched:
                self.rows.remove(row)

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        return FakeResult([copy.deepcopy(row) for row in matched])


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failing_tables = set()
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def next_timestamp(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def add_profile(self, user_id=USER_ID, **fields):
        row = {
            "id": user_id,
            "email": fields.pop("email", "owner@trattoria.test"),
            "name": None,
            "avatar_url": None,
            "stripe_customer_id": None,
            "stripe_subscription_id": None,
            "subscription_status": None,
            "has_activated": False,
            "menu_credits": 0,
            "total_generated": 0,
            "created_at": self.next_timestamp(),
        }
        row.update(fields)
        self.tables.setdefault("profiles", []).append(row)
        return row

    def add_generation(self, user_id=USER_ID, **fields):
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "file_name": "menu.pdf",
            "extracted_text": "Margherita 12\nTiramisu 7",
            "colors": ["#1a1a1a", "#c9a96e"],
            "size": "a4",
            "style_prompt": "",
            "html_variations": None,
            "selected_variation": None,
            "is_downloaded": False,
            "created_at": self.next_timestamp(),
        }
        row.update(fields)
        self.tables.setdefault("menu_generations", []).append(row)
        return row

    def profile(self, user_id=USER_ID):
        return next(r for r in self.tables.get("profiles", []) if r["id"] == user_id)


class FakeDesigner:
    def __init__(self, html=SAMPLE_HTML, error=None):
        self.html = html
        self.error = error
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return [self.html]


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    monkeypatch.setattr(settings, "payment_required", True)
    monkeypatch.setattr(settings, "environment", "production")
    monkeypatch.setattr(settings, "stripe_secret_key", None)
    monkeypatch.setattr(settings, "stripe_webhook_secret", None)
    monkeypatch.setattr(settings, "anthropic_api_key", None)
    clear_auth_cache()
    clear_product_cache()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def current_user():
    return {
        "id": USER_ID,
        "email": "owner@trattoria.test",
        "user_metadata": {"full_name": "Giulia Rossi"},
        "app_metadata": {},
    }


@pytest.fixture
def designer():
    return FakeDesigner()


@pytest.fixture
def client(fake_db, current_user, designer):
    app.dependency_overrides[get_supabase_admin] = lambda: fake_db
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_menu_designer] = lambda: designer
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anonymous_client(fake_db):
    app.dependency_overrides[get_supabase_admin] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
