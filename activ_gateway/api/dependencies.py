"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Query, Request

from activ_gateway.api.v1.schemas import DEFAULT_USER_ID
from activ_gateway.config import settings
from activ_gateway.domain.exceptions import NoLinkedItemError
from activ_gateway.infrastructure.clients.ai import AIClient
from activ_gateway.infrastructure.clients.plaid import PlaidClient
from activ_gateway.infrastructure.database.models import Base
from activ_gateway.infrastructure.database.session import SessionLocal, engine
from activ_gateway.infrastructure.token_store import (
    CredentialStore,
    InMemoryCredentialStore,
    SqlCredentialStore,
)

_memory_store = InMemoryCredentialStore()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_plaid_client() -> PlaidClient:
    """Provide Plaid API client instance"""
    return PlaidClient()


def get_ai_client() -> AIClient:
    """Provide AI provider client instance"""
    return AIClient()


@lru_cache
def _sql_store() -> SqlCredentialStore:
    Base.metadata.create_all(bind=engine)
    return SqlCredentialStore(SessionLocal)


def get_credential_store() -> CredentialStore:
    """Token store selected by TOKEN_STORE (memory | database)"""
    if settings.token_store.strip().lower() == "database":
        return _sql_store()
    return _memory_store


def get_user_id(user_id: str = Query(DEFAULT_USER_ID, alias="userId")) -> str:
    return user_id or DEFAULT_USER_ID


def require_access_token(
    user_id: str = Depends(get_user_id),
    store: CredentialStore = Depends(get_credential_store),
) -> str:
    """Access token of the user's linked item, or 401 NO_LINKED_ITEM_FOR_USER"""
    token = store.get(user_id)
    if not token:
        raise NoLinkedItemError()
    return token
