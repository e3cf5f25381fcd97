"""Plaid data passthrough endpoints for the user's linked item"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from activ_gateway.api.v1.schemas import SyncRequest
from activ_gateway.api.dependencies import get_credential_store, get_plaid_client, require_access_token
from activ_gateway.domain.exceptions import NoLinkedItemError
from activ_gateway.infrastructure.clients.plaid import PlaidClient
from activ_gateway.infrastructure.token_store import CredentialStore
from activ_gateway.utils.date_utils import days_ago

router = APIRouter()

TRANSACTIONS_LOOKBACK_DAYS = 30
INVESTMENT_TRANSACTIONS_LOOKBACK_DAYS = 90


@router.get("/plaid/accounts")
@router.get("/plaid/balances")
async def get_accounts(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    """Accounts with real-time balances"""
    return await plaid.get_accounts(token)


@router.get("/plaid/transactions")
async def get_transactions(
    start: Optional[str] = Query(None, description="YYYY-MM-DD, default 30 days ago"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD, default today"),
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_transactions(
        token, start or days_ago(TRANSACTIONS_LOOKBACK_DAYS), end or days_ago(0)
    )


@router.post("/plaid/transactions/sync")
async def sync_transactions(
    body: Optional[SyncRequest] = None,
    store: CredentialStore = Depends(get_credential_store),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    """Incremental transaction updates from `cursor` (omit for a full sync)"""
    body = body or SyncRequest()
    token = store.get(body.resolved_user_id)
    if not token:
        raise NoLinkedItemError()
    return await plaid.sync_transactions(token, body.cursor)


@router.get("/plaid/liabilities")
async def get_liabilities(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_liabilities(token)


@router.get("/plaid/investments/holdings")
async def get_investment_holdings(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_investment_holdings(token)


@router.get("/plaid/investments/transactions")
async def get_investment_transactions(
    start: Optional[str] = Query(None, description="YYYY-MM-DD, default 90 days ago"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD, default today"),
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_investment_transactions(
        token, start or days_ago(INVESTMENT_TRANSACTIONS_LOOKBACK_DAYS), end or days_ago(0)
    )


@router.get("/plaid/auth")
async def get_auth(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_auth(token)


@router.get("/plaid/identity")
async def get_identity(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_identity(token)


@router.get("/plaid/item")
async def get_item(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
) -> Dict[str, Any]:
    return await plaid.get_item(token)
