"""Pytest fixtures for testing"""

import pytest
import httpx
from typing import Any, Dict, Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from activ_gateway.api.dependencies import get_credential_store, get_plaid_client
from activ_gateway.api.main import create_app
from activ_gateway.infrastructure.clients.plaid import PlaidClient
from activ_gateway.infrastructure.database.models import Base
from activ_gateway.infrastructure.database.session import make_engine
from activ_gateway.infrastructure.token_store import InMemoryCredentialStore
from mock_plaid.server import create_app as create_mock_plaid


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = make_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

MOCK_PLAID_URL = "http://mock-plaid"


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """Create test database and hand out its session factory"""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def app(store: InMemoryCredentialStore) -> FastAPI:
    """Gateway app using an isolated in-memory token store"""
    app = create_app()
    app.dependency_overrides[get_credential_store] = lambda: store
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client"""
    return TestClient(app)


@pytest.fixture
def mock_plaid() -> FastAPI:
    return create_mock_plaid()


@pytest.fixture
def gateway(app: FastAPI, mock_plaid: FastAPI) -> TestClient:
    """Test client whose Plaid calls are served by the in-process mock Plaid API"""
    transport = httpx.ASGITransport(app=mock_plaid)

    def plaid_client() -> PlaidClient:
        return PlaidClient(
            base_url=MOCK_PLAID_URL,
            client_id="test-client-id",
            secret="test-secret",
            timeout=5.0,
            transport=transport,
        )

    app.dependency_overrides[get_plaid_client] = plaid_client
    return TestClient(app)


@pytest.fixture
def accounts_payload() -> Dict[str, Any]:
    """/accounts/balance/get response with one account of each cash subtype plus a card"""
    return {
        "accounts": [
            {
                "account_id": "chk",
                "name": "Checking",
                "mask": "0000",
                "type": "depository",
                "subtype": "checking",
                "balances": {"available": 100, "current": 110, "iso_currency_code": "USD"},
            },
            {
                "account_id": "sav",
                "name": "Savings",
                "mask": "1111",
                "type": "depository",
                "subtype": "savings",
                "balances": {"available": None, "current": 50, "iso_currency_code": "USD"},
            },
            {
                "account_id": "mm",
                "official_name": "Money Market",
                "type": "depository",
                "subtype": "money market",
                "balances": {"available": 25.555, "unofficial_currency_code": "EUR"},
            },
            {
                "account_id": "cc",
                "name": "Card",
                "type": "credit",
                "subtype": "credit card",
                "balances": {"available": 900, "current": 100},
            },
        ]
    }


@pytest.fixture
def transactions_payload() -> Dict[str, Any]:
    """30 days of transactions in Plaid's sign convention (outflows positive)"""
    return {
        "transactions": [
            {"name": "Payroll", "amount": -4000, "category": ["Transfer", "Payroll"]},
            {"name": "Rent", "amount": 1800, "personal_finance_category": {"primary": "RENT_AND_UTILITIES"}},
            {"name": "Trader Joe's", "amount": 250, "category": ["Shops", "Supermarkets and Groceries"]},
            {"name": "Cinema", "amount": 50, "category": ["Recreation", "Arts and Entertainment"]},
            {"name": "Refund", "amount": -100, "category": ["Shops"]},
        ]
    }
