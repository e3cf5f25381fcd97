"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from activ_gateway.domain.exceptions import PlaidAPIError
from activ_gateway.domain.models import FinancialSnapshot
from activ_gateway.infrastructure.token_store import InMemoryCredentialStore


@pytest.fixture
def snapshot(accounts_payload, transactions_payload) -> FinancialSnapshot:
    return FinancialSnapshot(
        accounts=accounts_payload,
        liabilities={"liabilities": {"credit": [{"balance": {"current": 75.56}}]}},
        holdings=None,
        transactions=transactions_payload,
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_root_and_ping(client: TestClient):
    root = client.get("/").json()
    assert root["ok"] is True
    assert "env" in root
    assert isinstance(root["countries"], list)

    assert client.get("/ping").json()["ok"] is True


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/ping", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.post")
def test_metrics_endpoint(mock_post: AsyncMock, client: TestClient):
    """Test Prometheus metrics endpoint"""
    mock_post.return_value = {"link_token": "link-1", "expiration": "2030-01-01T00:00:00Z"}
    client.post("/plaid/link_token/create", json={"userId": "u1", "products": ["transactions"]})

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "activ_link_token_total" in response.text
    assert "http_request_duration_seconds" in response.text


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.post")
def test_link_token_negotiates_products(mock_post: AsyncMock, client: TestClient):
    """Test POST /plaid/link_token/create dropping a product Plaid refuses"""
    mock_post.side_effect = [
        PlaidAPIError("INVALID_PRODUCT", "not authorized: [investments]", 400),
        {"link_token": "link-sandbox-abc", "expiration": "2030-01-01T00:00:00Z"},
    ]

    response = client.post(
        "/plaid/link_token/create",
        json={"userId": "user-7", "products": ["transactions", "investments"]},
    )

    assert response.status_code == 200
    assert response.json() == {
        "link_token": "link-sandbox-abc",
        "expiration": "2030-01-01T00:00:00Z",
        "userId": "user-7",
        "products_used": ["transactions"],
    }
    assert mock_post.await_count == 2


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.post")
def test_link_token_without_body_uses_default_user(mock_post: AsyncMock, client: TestClient):
    mock_post.return_value = {"link_token": "link-1", "expiration": None}

    response = client.post("/plaid/link_token/create")

    assert response.status_code == 200
    assert response.json()["userId"] == "default"
    body = mock_post.await_args.args[1]
    assert body["user"] == {"client_user_id": "default"}


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.post")
def test_plaid_error_is_passed_through(mock_post: AsyncMock, client: TestClient):
    details = {"error_code": "INVALID_API_KEYS", "error_message": "invalid client_id or secret provided"}
    mock_post.side_effect = PlaidAPIError.from_response(400, details)

    response = client.post("/plaid/link_token/create", json={"products": ["auth"]})

    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_API_KEYS", "details": details}


def test_exchange_requires_public_token(client: TestClient):
    response = client.post("/plaid/exchange_public_token", json={"userId": "u1"})

    assert response.status_code == 400
    assert response.json() == {"error": "MISSING_PUBLIC_TOKEN"}


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.exchange_public_token")
def test_exchange_stores_token(mock_exchange: AsyncMock, client: TestClient, store: InMemoryCredentialStore):
    mock_exchange.return_value = {"access_token": "access-sandbox-1", "item_id": "item-1"}

    response = client.post("/plaid/exchange_public_token", json={"userId": "u1", "public_token": "public-1"})

    assert response.status_code == 200
    assert response.json() == {"item_id": "item-1", "stored_for_user": "u1"}
    assert store.get("u1") == "access-sandbox-1"


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.exchange_public_token")
def test_exchange_without_access_token_in_response(
    mock_exchange: AsyncMock, client: TestClient, store: InMemoryCredentialStore
):
    mock_exchange.return_value = {"item_id": "item-1", "request_id": "r1"}

    response = client.post("/plaid/exchange_public_token", json={"userId": "u1", "public_token": "public-1"})

    assert response.status_code == 502
    assert response.json()["error"] == "PLAID_ERROR"
    assert store.get("u1") is None


@pytest.mark.parametrize("path", [
    "/plaid/accounts",
    "/plaid/balances",
    "/plaid/transactions",
    "/plaid/liabilities",
    "/plaid/investments/holdings",
    "/plaid/investments/transactions",
    "/plaid/auth",
    "/plaid/identity",
    "/plaid/item",
    "/budget",
])
def test_data_endpoints_require_linked_item(client: TestClient, path: str):
    response = client.get(path, params={"userId": "nobody"})

    assert response.status_code == 401
    assert response.json() == {"error": "NO_LINKED_ITEM_FOR_USER"}


def test_sync_requires_linked_item(client: TestClient):
    response = client.post("/plaid/transactions/sync", json={"userId": "nobody"})

    assert response.status_code == 401
    assert response.json() == {"error": "NO_LINKED_ITEM_FOR_USER"}


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.get_transactions")
def test_transactions_default_window(mock_txns: AsyncMock, client: TestClient, store: InMemoryCredentialStore):
    store.set("u1", "access-1")
    mock_txns.return_value = {"transactions": []}

    response = client.get("/plaid/transactions", params={"userId": "u1", "start": "2026-01-01"})

    assert response.status_code == 200
    token, start, end = mock_txns.await_args.args
    assert token == "access-1"
    assert start == "2026-01-01"
    assert len(end) == 10


def test_summary_when_not_linked(client: TestClient):
    response = client.get("/summary", params={"userId": "nobody"})

    assert response.status_code == 200
    assert response.json() == {"linked": False}


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.fetch_snapshot")
def test_summary_when_linked(
    mock_snapshot: AsyncMock,
    client: TestClient,
    store: InMemoryCredentialStore,
    snapshot: FinancialSnapshot,
):
    store.set("u1", "access-1")
    mock_snapshot.return_value = snapshot

    response = client.get("/summary", params={"userId": "u1"})

    assert response.status_code == 200
    data = response.json()
    assert data["linked"] is True
    assert data["userId"] == "u1"
    assert len(data["accounts"]) == 4
    assert data["kpis"]["totalCash"] == 175.56
    assert data["kpis"]["totalLiabilities"] == 75.56
    assert data["kpis"]["netWorth"] == 100
    assert data["kpis"]["savingsRate"] == 0.49
    assert data["budget"]["targets"] == {"needs": 50, "wants": 30, "savings": 20}

    # A null balance is reported, not dropped
    savings = next(a for a in data["accounts"] if a["account_id"] == "sav")
    assert savings["available"] is None


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.fetch_snapshot")
def test_summary_failure(mock_snapshot: AsyncMock, client: TestClient, store: InMemoryCredentialStore):
    store.set("u1", "access-1")
    mock_snapshot.side_effect = RuntimeError("boom")

    response = client.get("/summary", params={"userId": "u1"})

    assert response.status_code == 500
    assert response.json() == {"error": "SUMMARY_ERROR"}


def test_chat_requires_message(client: TestClient):
    response = client.post("/jamari/chat", json={"userId": "u1", "message": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "NO_MESSAGE"}


@patch("activ_gateway.infrastructure.clients.ai.AIClient.ask_all")
def test_chat_fuses_provider_replies(mock_ask: AsyncMock, client: TestClient):
    mock_ask.return_value = {
        "openai": "Keep three months of expenses saved.",
        "anthropic": None,
        "gemini": "Keep three months of expenses saved. Automate transfers.",
    }

    response = client.post("/jamari/chat", json={"userId": "nobody", "message": "How do I start?"})

    assert response.status_code == 200
    assert response.json() == {
        "reply": "Keep three months of expenses saved. Automate transfers.",
        "providers": {"openai": True, "anthropic": False, "gemini": True},
    }
    prompt, _ = mock_ask.await_args.args
    assert prompt.endswith("User: How do I start?")
    assert "NetWorth: $0" in prompt


@patch("activ_gateway.infrastructure.clients.ai.AIClient.ask_all")
def test_chat_without_any_provider(mock_ask: AsyncMock, client: TestClient):
    mock_ask.return_value = {"openai": None, "anthropic": None, "gemini": None}

    response = client.post("/jamari/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert "no AI providers responded" in response.json()["reply"]


def test_unlink_with_nothing_linked(client: TestClient):
    response = client.post("/plaid/unlink", json={"userId": "nobody"})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Nothing to unlink"}


@patch("activ_gateway.infrastructure.clients.plaid.PlaidClient.remove_item")
def test_unlink_removes_item(mock_remove: AsyncMock, client: TestClient, store: InMemoryCredentialStore):
    store.set("u1", "access-1")
    mock_remove.return_value = {}

    response = client.post("/plaid/unlink", json={"userId": "u1"})

    assert response.json() == {"ok": True}
    mock_remove.assert_awaited_once_with("access-1")
    assert store.get("u1") is None


def test_user_delete(client: TestClient, store: InMemoryCredentialStore):
    store.set("u1", "access-1")

    response = client.post("/user/delete", json={"user_id": "u1"})

    assert response.json() == {"ok": True}
    assert store.get("u1") is None


def test_webhook_acknowledged(client: TestClient):
    response = client.post("/plaid/webhook", json={"webhook_type": "TRANSACTIONS", "webhook_code": "SYNC_UPDATES_AVAILABLE"})
    assert response.status_code == 200
