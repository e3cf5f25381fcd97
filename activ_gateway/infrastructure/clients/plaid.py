"""Plaid API HTTP client"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Dict, Optional

import httpx

from activ_gateway.config import settings
from activ_gateway.domain.exceptions import PlaidAPIError
from activ_gateway.domain.models import FinancialSnapshot
from activ_gateway.infrastructure.observability.metrics import (
    plaid_fetch_unavailable_counter,
    plaid_request_failures_counter,
)
from activ_gateway.utils.date_utils import lookback_window

SUMMARY_LOOKBACK_DAYS = 30
TRANSACTIONS_PAGE_SIZE = 250
SYNC_PAGE_SIZE = 500


class PlaidClient:
    """Client for the Plaid REST API"""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.plaid_base_url
        self.client_id = client_id if client_id is not None else settings.plaid_client_id
        self.secret = secret if secret is not None else settings.plaid_secret
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON body to a Plaid endpoint.

        Raises:
            PlaidAPIError: On a non-2xx response (carrying Plaid's error_code
                and error_message), timeout or network failure
        """
        headers = {
            "Content-Type": "application/json",
            "PLAID-CLIENT-ID": self.client_id,
            "PLAID-SECRET": self.secret,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(f"{self.base_url}{path}", json=body, headers=headers)
            except httpx.TimeoutException as e:
                plaid_request_failures_counter.labels(code="PLAID_UNAVAILABLE").inc()
                raise PlaidAPIError(
                    "PLAID_UNAVAILABLE", f"Plaid timeout after {self.timeout}s", http_status=503
                ) from e
            except httpx.RequestError as e:
                plaid_request_failures_counter.labels(code="PLAID_UNAVAILABLE").inc()
                raise PlaidAPIError("PLAID_UNAVAILABLE", f"Plaid request failed: {e}", http_status=503) from e

        data = _parse_body(response.text)

        if not response.is_success:
            error = PlaidAPIError.from_response(response.status_code, data)
            plaid_request_failures_counter.labels(code=error.code).inc()
            logging.warning(f"Plaid error on {path}: {error.code}", extra={"http_status": response.status_code})
            raise error

        return data

    # Item lifecycle

    async def exchange_public_token(self, public_token: str) -> Dict[str, Any]:
        return await self.post("/item/public_token/exchange", {"public_token": public_token})

    async def remove_item(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/item/remove", {"access_token": access_token})

    async def get_item(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/item/get", {"access_token": access_token})

    # Data products

    async def get_accounts(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/accounts/balance/get", {"access_token": access_token})

    async def get_transactions(self, access_token: str, start_date: str, end_date: str) -> Dict[str, Any]:
        return await self.post(
            "/transactions/get",
            {
                "access_token": access_token,
                "start_date": start_date,
                "end_date": end_date,
                "options": {"count": TRANSACTIONS_PAGE_SIZE, "offset": 0},
            },
        )

    async def sync_transactions(self, access_token: str, cursor: Optional[str] = None) -> Dict[str, Any]:
        return await self.post(
            "/transactions/sync",
            {"access_token": access_token, "cursor": cursor, "count": SYNC_PAGE_SIZE},
        )

    async def get_liabilities(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/liabilities/get", {"access_token": access_token})

    async def get_investment_holdings(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/investments/holdings/get", {"access_token": access_token})

    async def get_investment_transactions(self, access_token: str, start_date: str, end_date: str) -> Dict[str, Any]:
        return await self.post(
            "/investments/transactions/get",
            {"access_token": access_token, "start_date": start_date, "end_date": end_date},
        )

    async def get_auth(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/auth/get", {"access_token": access_token})

    async def get_identity(self, access_token: str) -> Dict[str, Any]:
        return await self.post("/identity/get", {"access_token": access_token})

    # Best-effort fetches feeding the KPI summary

    async def _optional(self, source: str, call: Awaitable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        try:
            return await call
        except PlaidAPIError as e:
            plaid_fetch_unavailable_counter.labels(source=source).inc()
            logging.warning(f"{source} unavailable: {e.code}", extra={"source": source})
            return None

    async def fetch_accounts(self, access_token: str) -> Optional[Dict[str, Any]]:
        return await self._optional("accounts", self.get_accounts(access_token))

    async def fetch_liabilities(self, access_token: str) -> Optional[Dict[str, Any]]:
        return await self._optional("liabilities", self.get_liabilities(access_token))

    async def fetch_investment_holdings(self, access_token: str) -> Optional[Dict[str, Any]]:
        return await self._optional("investments", self.get_investment_holdings(access_token))

    async def fetch_transactions(self, access_token: str, start_date: str, end_date: str) -> Optional[Dict[str, Any]]:
        return await self._optional("transactions", self.get_transactions(access_token, start_date, end_date))

    async def fetch_snapshot(self, access_token: str) -> FinancialSnapshot:
        """Fetch accounts, liabilities, holdings and 30-day transactions concurrently"""
        start, end = lookback_window(SUMMARY_LOOKBACK_DAYS)
        accounts, liabilities, holdings, transactions = await asyncio.gather(
            self.fetch_accounts(access_token),
            self.fetch_liabilities(access_token),
            self.fetch_investment_holdings(access_token),
            self.fetch_transactions(access_token, start, end),
        )
        return FinancialSnapshot(
            accounts=accounts,
            liabilities=liabilities,
            holdings=holdings,
            transactions=transactions,
        )


def _parse_body(text: str) -> Dict[str, Any]:
    if not text:
        return {}
    try:
        data = json.loads(text)
    except ValueError:
        return {"raw": text}
    return data if isinstance(data, dict) else {"raw": data}
