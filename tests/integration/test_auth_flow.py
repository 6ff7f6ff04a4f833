"""
Integration tests for the full authentication flow.

These tests wire the real state manager, HTTP identity validator and file
store together. The identity endpoint is served by httpx.MockTransport, so
no network is needed.

Usage:
    pytest tests/integration/test_auth_flow.py -v
"""

import json

import httpx
import pytest

from owlauth.modules.auth import (
    AuthState,
    AuthStateManager,
    HttpIdentityValidator,
    RevalidationFailed,
)
from owlauth.modules.storage import FileCredentialStore


# =============================================================================
# Test Helpers
# =============================================================================

class FakeIdentityService:
    """Identity endpoint that knows a fixed set of API keys."""

    def __init__(self, users):
        self.users = dict(users)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path != "/api/v1/user/info":
            return httpx.Response(404)

        user_id = self.users.get(request.headers.get("X-API-Key"))
        if user_id is None:
            return httpx.Response(401, json={"detail": "unknown key"})
        return httpx.Response(200, json={"userId": user_id})


@pytest.fixture
def identity_service():
    return FakeIdentityService({"sk_live_alice_0001": "alice", "sk_live_bob_0002": "bob"})


@pytest.fixture
def http_client(identity_service):
    return httpx.AsyncClient(transport=httpx.MockTransport(identity_service))


@pytest.fixture
def credentials_path(tmp_path):
    return tmp_path / "owl-control" / "credentials.json"


async def start_app(credentials_path, http_client, bypass_auth=False) -> AuthStateManager:
    """Simulate one application launch."""
    validator = HttpIdentityValidator("https://api.example.com", client=http_client)
    return await AuthStateManager.create(
        FileCredentialStore(credentials_path), validator, bypass_auth=bypass_auth
    )


# =============================================================================
# Tests
# =============================================================================

@pytest.mark.asyncio
async def test_login_consent_restart_logout(credentials_path, http_client, identity_service):
    """A user logs in, consents, restarts the app and finally logs out."""
    app = await start_app(credentials_path, http_client)
    assert app.state == AuthState.UNAUTHENTICATED

    result = await app.validate_credential("sk_live_alice_0001")
    assert result.to_dict() == {"success": True, "userId": "alice"}
    assert app.state == AuthState.HAS_CREDENTIAL_NO_CONSENT

    assert await app.record_consent(True) is True
    assert app.state == AuthState.AUTHENTICATED
    assert json.loads(credentials_path.read_text()) == {
        "apiKey": "sk_live_alice_0001",
        "hasConsented": "true",
    }

    # Second launch: state comes back from disk, user id needs the network
    relaunched = await start_app(credentials_path, http_client)
    assert relaunched.is_authenticated() is True
    assert relaunched.get_user_info().needs_revalidation is True
    requests_before = len(identity_service.requests)

    info = await relaunched.fetch_user_info()
    assert info.to_dict() == {
        "authenticated": True,
        "hasApiKey": True,
        "hasConsented": True,
        "method": "apiKey",
        "apiKey": "sk_live_al...",
        "userId": "alice",
    }
    assert len(identity_service.requests) == requests_before + 1

    assert await relaunched.logout() is True
    assert json.loads(credentials_path.read_text()) == {"apiKey": "", "hasConsented": "false"}

    third = await start_app(credentials_path, http_client)
    assert third.state == AuthState.UNAUTHENTICATED
    await http_client.aclose()


@pytest.mark.asyncio
async def test_rejected_key_is_not_stored(credentials_path, http_client):
    """A key the service does not know leaves nothing on disk."""
    app = await start_app(credentials_path, http_client)

    result = await app.validate_credential("sk_live_mallory_9999")

    assert result.success is False
    assert result.message == "Invalid API key, or server unavailable: Unauthorized"
    assert not credentials_path.exists()
    await http_client.aclose()


@pytest.mark.asyncio
async def test_revoked_key_fails_revalidation(credentials_path, http_client, identity_service):
    """A stored key revoked server-side makes the user info fetch fail hard."""
    app = await start_app(credentials_path, http_client)
    await app.validate_credential("sk_live_bob_0002")
    await app.record_consent(True)

    del identity_service.users["sk_live_bob_0002"]
    relaunched = await start_app(credentials_path, http_client)

    with pytest.raises(RevalidationFailed):
        await relaunched.fetch_user_info()
    assert relaunched.has_credential() is True
    await http_client.aclose()


@pytest.mark.asyncio
async def test_switching_accounts_without_logout(credentials_path, http_client):
    """Validating a second key replaces the first on disk and in memory."""
    app = await start_app(credentials_path, http_client)
    await app.validate_credential("sk_live_alice_0001")

    result = await app.validate_credential("sk_live_bob_0002")

    assert result.user_id == "bob"
    assert app.user_id == "bob"
    assert json.loads(credentials_path.read_text())["apiKey"] == "sk_live_bob_0002"
    await http_client.aclose()


@pytest.mark.asyncio
async def test_corrupt_credentials_file_starts_clean(credentials_path, http_client):
    """An unreadable file does not stop the app from starting."""
    credentials_path.parent.mkdir(parents=True)
    credentials_path.write_text("{garbage")

    app = await start_app(credentials_path, http_client, bypass_auth=True)

    assert app.has_credential() is False
    assert app.is_authenticated() is True
    await http_client.aclose()


@pytest.mark.asyncio
async def test_logout_repairs_corrupt_credentials_file(credentials_path, http_client):
    """Logging out over a torn file leaves a clean, loadable one."""
    credentials_path.parent.mkdir(parents=True)
    credentials_path.write_text('{"apiKey": "sk_live_al')

    app = await start_app(credentials_path, http_client)

    assert await app.logout() is True
    assert json.loads(credentials_path.read_text()) == {"apiKey": "", "hasConsented": "false"}
    await http_client.aclose()
