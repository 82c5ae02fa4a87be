import pytest
import requests
from types import SimpleNamespace
from fastapi.testclient import TestClient

from app.main import app
from app.core.dependencies import get_current_user
from app.core.rate_limit import limiter, message_limiter
from app.database.supabase_client import get_supabase, get_auth_client
from app.modules.auth.service import clear_auth_cache
from fakes import FakeSupabase
from helpers import USER_A, USER_B, USER_C


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def auth_state():
    return {"id": USER_A, "email": "alice@example.com", "user_metadata": {}}


@pytest.fixture
def outbound(monkeypatch):
    """Captures every requests.post made for push and email delivery."""
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None, **kwargs):
        calls.append(SimpleNamespace(url=url, json=json, headers=headers or {}))
        return SimpleNamespace(status_code=200, text="ok", json=lambda: {"data": []})

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


@pytest.fixture
def client(db, auth_state, outbound):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_auth_client] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: auth_state
    limiter.enabled = False
    message_limiter.reset()
    clear_auth_cache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def login_as(auth_state):
    def _login(user_id: str, email: str = None):
        auth_state["id"] = user_id
        auth_state["email"] = email or f"{user_id[:8]}@example.com"
    return _login


@pytest.fixture
def profiles(db):
    """Three users with profiles; A and B stand in Lisbon, C in Porto."""
    db.seed("profiles", id=USER_A, username="alice", full_name="Alice", latitude=38.7223, longitude=-9.1393)
    db.seed("profiles", id=USER_B, username="bob", full_name="Bob", latitude=38.7230, longitude=-9.1400)
    db.seed("profiles", id=USER_C, username="carol", full_name=None, latitude=41.1579, longitude=-8.6291)
    return db


@pytest.fixture
def friends_ab(db):
    low, high = sorted([USER_A, USER_B])
    return db.seed("friends", user_id_1=low, user_id_2=high)
