"""HTTP Routes tests — root, health, chat history auth, origin-policy CORS, error envelopes.

Design Decisions:
    - httpx ASGITransport: lifespan not run, gateway injected via app.state
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tunechat.api.error_handlers import register_error_handlers
from tunechat.core.errors import PolicyError

from tests.services.fakes import make_token


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


async def test_root_says_api_working(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.text == "API Working"


async def test_liveness_reports_connection_count(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["connections"] == 0


async def test_readiness_without_database_is_503(client, monkeypatch):
    monkeypatch.setattr("tunechat.infrastructure.database.db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503


async def test_readiness_with_database_is_ready(client, db_manager, monkeypatch):
    monkeypatch.setattr("tunechat.infrastructure.database.db_manager", db_manager)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["status"] == "ready"


async def test_history_requires_credential(client):
    res = await client.get("/api/chat/messages")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_ERROR"
    assert res.json()["error"]["message"] == "Authentication error"
    assert res.headers["www-authenticate"] == "Bearer"


async def test_history_returns_messages_oldest_first(client, store, alice_id):
    await store.create(alice_id, "Alice", "first")
    await store.create(alice_id, "Alice", "second")

    res = await client.get(
        "/api/chat/messages",
        headers={"Authorization": f"Bearer {make_token(alice_id)}"},
    )

    assert res.status_code == 200
    texts = [m["text"] for m in res.json()["messages"]]
    assert texts == ["first", "second"]
    assert res.json()["messages"][0]["userId"] == str(alice_id)


async def test_history_accepts_query_token_and_limit(client, store, alice_id):
    for i in range(3):
        await store.create(alice_id, "Alice", f"m{i}")

    res = await client.get(
        "/api/chat/messages", params={"token": make_token(alice_id), "limit": 2},
    )

    assert [m["text"] for m in res.json()["messages"]] == ["m1", "m2"]


async def test_history_limit_out_of_range_is_400(client, alice_id):
    res = await client.get(
        "/api/chat/messages", params={"token": make_token(alice_id), "limit": 0},
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "limit"
    assert error["details"][0]["location"] == "query"


async def test_cors_echoes_same_host_different_port(client):
    res = await client.get("/", headers={"Origin": "http://localhost:9999"})
    assert res.headers["access-control-allow-origin"] == "http://localhost:9999"
    assert res.headers["access-control-allow-credentials"] == "true"


async def test_cors_omits_headers_for_other_hosts(client):
    res = await client.get("/", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in res.headers


async def test_cors_preflight_denied_for_other_hosts(client):
    res = await client.options(
        "/api/chat/messages",
        headers={
            "Origin": "http://evil.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert res.status_code == 400


async def test_cors_preflight_allowed_for_listed_origin(client):
    res = await client.options(
        "/api/chat/messages",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.fixture
async def failing_client():
    failing = FastAPI()
    register_error_handlers(failing)

    @failing.get("/denied")
    async def denied():
        raise PolicyError("http://evil.example")

    @failing.get("/broken")
    async def broken():
        raise RuntimeError("db password is hunter2")

    async with AsyncClient(
        transport=ASGITransport(app=failing, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c


async def test_policy_error_is_403_without_bearer_challenge(failing_client):
    res = await failing_client.get("/denied")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Not allowed by CORS"
    assert "www-authenticate" not in res.headers


async def test_unexpected_error_is_opaque_500(failing_client):
    res = await failing_client.get("/broken")
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "INTERNAL_ERROR"
    assert "hunter2" not in res.text
