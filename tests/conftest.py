import base64
import hashlib
import json
import time
from collections.abc import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from jobrelay.config.settings import Settings
from jobrelay.infra.container import Services, build_services
from jobrelay.main import create_app

CALLBACK_URL = "https://relay.test/v1/jobs/worker"
CURRENT_KEY = "sig_current_0123456789abcdef"
NEXT_KEY = "sig_next_fedcba9876543210"


def sign(
    body: bytes,
    key: str = CURRENT_KEY,
    url: str = CALLBACK_URL,
    expires_in: int = 300,
    **claims,
) -> str:
    """Produce a signature the way the push-queue does."""
    now = int(time.time())
    digest = base64.urlsafe_b64encode(hashlib.sha256(body).digest()).decode()
    payload = {
        "iss": "Upstash",
        "sub": url,
        "iat": now,
        "nbf": now,
        "exp": now + expires_in,
        "jti": f"jwt_{now}",
        "body": digest.rstrip("="),
    }
    payload.update(claims)
    return jwt.encode(payload, key, algorithm="HS256")


class FakeQueue:
    """Push-queue stand-in that records publish requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": "rejected"})
        return httpx.Response(
            self.status_code, json={"messageId": f"msg_{len(self.requests)}"}
        )

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]


class RecordingNotifier:
    """Notifier that remembers every welcome it sends."""

    def __init__(self):
        self.sent: list[str] = []

    async def send_welcome(self, user_id, email, full_name) -> str:
        self.sent.append(user_id)
        return f"notif_{len(self.sent)}"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a per-test SQLite database and a fake queue."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}",
        queue_url="https://queue.test",
        queue_token="test-token",
        queue_current_signing_key=CURRENT_KEY,
        queue_next_signing_key=NEXT_KEY,
        worker_callback_url=CALLBACK_URL,
        app_base_url=None,
        queue_max_retries=None,
    )


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def services(
    settings, fake_queue, notifier
) -> AsyncGenerator[Services, None]:
    """Services wired to SQLite and the fake queue, with tables created."""
    services = build_services(
        settings,
        notifier=notifier,
        queue_transport=httpx.MockTransport(fake_queue.handler),
    )
    await services.database.create_all()
    yield services
    await services.aclose()


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def processor(services):
    return services.processor


@pytest.fixture
def enqueuer(services):
    return services.enqueuer


@pytest.fixture
def app(settings, services):
    return create_app(settings, services)


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="https://relay.test") as ac:
        yield ac


@pytest.fixture
def deliver(async_client):
    """POST a signed worker delivery; pass ``signature=None`` to omit the header."""

    async def _deliver(body: dict | bytes, signature: str | None = "auto", **kwargs):
        raw = body if isinstance(body, bytes) else json.dumps(body).encode()
        headers = {"Content-Type": "application/json"}
        if signature == "auto":
            signature = sign(raw, **kwargs)
        if signature is not None:
            headers["Upstash-Signature"] = signature
        return await async_client.post("/v1/jobs/worker", content=raw, headers=headers)

    return _deliver
