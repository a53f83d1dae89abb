"""
Pytest configuration and shared fixtures for the UbuntuMeet backend tests.
"""

import pytest
import httpx
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from ubuntumeet.auth.session import SESSION_COOKIE, session_token_for
from ubuntumeet.baas.supabase import AuthSession, SupabaseClient
from ubuntumeet.database.models.profile_models import AuthUser
from ubuntumeet.main import app
from ubuntumeet.rooms.daily import get_daily_client


@pytest.fixture
def daily_key(monkeypatch):
    """Provider secret present, default env var name."""
    monkeypatch.setenv("DAILY_API_KEY", "test-daily-key")
    monkeypatch.delenv("DAILY_API_KEY_ENV", raising=False)
    return "test-daily-key"


@pytest.fixture
def no_daily_key(monkeypatch):
    monkeypatch.delenv("DAILY_API_KEY", raising=False)
    monkeypatch.delenv("DAILY_API_KEY_ENV", raising=False)


@pytest.fixture
def sample_room():
    return {
        "id": "5e3cf703-5547-47d6-a371-37b1f0b4427f",
        "name": "w2pp2cf4kltgFACPKXmX",
        "api_created": True,
        "privacy": "public",
        "url": "https://ubuntumeet.daily.co/w2pp2cf4kltgFACPKXmX",
        "created_at": "2026-10-19T09:00:00.000Z",
        "config": {"exp": 1792400000},
    }


@pytest.fixture
def provider_requests():
    """Requests seen by the fake Daily.co API."""
    return []


@pytest.fixture
def daily_api(provider_requests):
    """Install a fake Daily.co API; call with a handler returning httpx.Response."""

    def install(handler):
        def recording_handler(request: httpx.Request):
            provider_requests.append(request)
            return handler(request)

        async def override():
            async with httpx.AsyncClient(transport=httpx.MockTransport(recording_handler)) as client:
                yield client

        app.dependency_overrides[get_daily_client] = override

    yield install
    app.dependency_overrides.pop(get_daily_client, None)


@pytest.fixture
def auth_user():
    return AuthUser(id="user-123", email="thandi@example.com", user_metadata={"full_name": "Thandi Nkosi"})


@pytest.fixture
def auth_session(auth_user):
    return AuthSession(access_token="sb-access", refresh_token="sb-refresh", expires_in=3600, user=auth_user)


@pytest.fixture
def mock_supabase(auth_user):
    """Supabase client double; async methods are AsyncMocks."""
    supabase = MagicMock(spec=SupabaseClient)
    supabase.get_user.return_value = auth_user
    supabase.select.return_value = []
    supabase.insert.return_value = []
    supabase.update.return_value = []
    return supabase


@pytest.fixture
def client(mock_supabase):
    """Test client without lifespan; the Supabase double sits on app.state."""
    app.state.supabase = mock_supabase
    test_client = TestClient(app)
    yield test_client
    test_client.close()


@pytest.fixture
def signed_in_client(client, auth_session):
    client.cookies.set(SESSION_COOKIE, session_token_for(auth_session))
    return client
