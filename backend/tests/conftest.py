"""
Pytest fixtures and configuration for Ops Notifier tests.

Provides:
- A fake NAVER WORKS API served through httpx.MockTransport
- A throwaway RSA service-account key
- A controllable clock for token expiry
- Settings, service and test client wired to the fakes
"""
import json
from typing import Any, Dict, Generator, List, Optional
from urllib.parse import parse_qs, unquote

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from ops_notifier.api.dependencies import get_notification_service
from ops_notifier.api.rate_limits import get_limiter
from ops_notifier.core.config import Settings
from ops_notifier.main import app
from ops_notifier.services.notifications import build_notification_service


AUTH_URL = "https://auth.worksmobile.com/oauth2/v2.0/token"
API_URL = "https://www.worksapis.com/v1.0"
BOT_ID = "bot-123"
CHANNEL_ID = "channel-abc"


# ==========================================
# FAKE NAVER WORKS API
# ==========================================

class FakeNaverWorks:
    """
    In-memory stand-in for the NAVER WORKS REST surface.

    Routes:
    - POST /oauth2/v2.0/token             -> issues token-1, token-2, ...
    - GET  /v1.0/users/{email}            -> {"userId": ...} or 404
    - POST /v1.0/bots/{bot}/users/{id}/messages
    - POST /v1.0/bots/{bot}/channels/{id}/messages
    """

    def __init__(self):
        self.users: Dict[str, str] = {}
        self.failing_targets: set = set()
        self.token_status: int = 200
        self.token_body: Optional[Dict[str, Any]] = None
        self.expires_in: Any = "86400"
        self.token_requests: List[Dict[str, str]] = []
        self.lookups: List[str] = []
        self.messages: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []

    def add_user(self, email: str, user_id: Optional[str] = None) -> str:
        user_id = user_id or f"user-{len(self.users) + 1}"
        self.users[email] = user_id
        return user_id

    @property
    def token_calls(self) -> int:
        return len(self.token_requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path)

        if request.url.host == "auth.worksmobile.com":
            return self._issue_token(request)

        parts = path.strip("/").split("/")  # ["v1.0", ...]

        if request.method == "GET" and parts[1] == "users":
            return self._lookup(request, parts[2])

        if request.method == "POST" and parts[1] == "bots" and parts[-1] == "messages":
            return self._message(request, kind=parts[3], target=parts[4])

        return httpx.Response(404, json={"code": "NOT_FOUND"})

    def _issue_token(self, request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        self.token_requests.append(form)

        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_client"})
        if self.token_body is not None:
            return httpx.Response(200, json=self.token_body)

        return httpx.Response(200, json={
            "access_token": f"token-{self.token_calls}",
            "token_type": "Bearer",
            "expires_in": self.expires_in,
            "scope": form.get("scope"),
        })

    def _lookup(self, request: httpx.Request, email: str) -> httpx.Response:
        self.lookups.append(email)
        if email not in self.users:
            return httpx.Response(404, json={"code": "RESOURCE_NOT_FOUND"})
        return httpx.Response(200, json={"userId": self.users[email], "email": email})

    def _message(self, request: httpx.Request, kind: str, target: str) -> httpx.Response:
        if target in self.failing_targets:
            return httpx.Response(500, json={"code": "INTERNAL_SERVER_ERROR"})

        self.messages.append({
            "kind": kind,
            "target": target,
            "authorization": request.headers.get("Authorization"),
            "body": json.loads(request.content),
        })
        return httpx.Response(201)

    def messages_to(self, target: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m["target"] == target]


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ==========================================
# KEYS & SETTINGS
# ==========================================

@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def make_settings(private_key_pem):
    """Factory for isolated settings (ignores .env and the process environment defaults)."""
    def _make(**overrides) -> Settings:
        values = {
            "naver_works_client_id": "client-id",
            "naver_works_client_secret": "client-secret",
            "naver_works_service_account": "svc@example.com",
            "naver_works_private_key": private_key_pem,
            "naver_works_bot_id": BOT_ID,
            "naver_works_auth_url": AUTH_URL,
            "naver_works_api_url": API_URL,
            "notification_channel_id": CHANNEL_ID,
            "notification_users": "",
            "app_base_url": "https://portal.example.com",
            "supabase_url": None,
            "supabase_anon_key": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def test_settings(make_settings) -> Settings:
    return make_settings()


# ==========================================
# FAKES
# ==========================================

@pytest.fixture
def naver_works() -> FakeNaverWorks:
    return FakeNaverWorks()


@pytest.fixture
def http_client(naver_works) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(naver_works.handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(test_settings, http_client):
    return build_notification_service(test_settings, http_client)


# ==========================================
# TEST CLIENT
# ==========================================

@pytest.fixture(autouse=True)
def reset_rate_limits():
    get_limiter().reset()
    yield


@pytest.fixture(scope="function")
def client(service) -> Generator[TestClient, None, None]:
    """
    Create a test client whose routes use the fake-backed pipeline.
    """
    app.dependency_overrides[get_notification_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client

    # Clear overrides after test
    app.dependency_overrides.clear()
