"""In-process stand-in for the Plaid API, serving canned items from items/*.json"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

DATA_DIR = Path(__file__).resolve().parent / "items"

# Products this mock client id is allowed to request in Link
DEFAULT_ENABLED_PRODUCTS = frozenset({"transactions", "auth", "identity", "liabilities"})


def plaid_error(status: int, error_type: str, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "error_type": error_type,
            "error_code": code,
            "error_message": message,
            "display_message": None,
            "request_id": uuid.uuid4().hex[:12],
        },
    )


def load_item(name: str) -> Optional[Dict[str, Any]]:
    file = DATA_DIR / f"{name}.json"
    if not file.exists():
        return None
    return json.loads(file.read_text())


# Plaid path -> builder of the response body from an item fixture
DATA_ENDPOINTS: Dict[str, Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]] = {
    "/accounts/balance/get": lambda item: {"accounts": item["accounts"]} if "accounts" in item else None,
    "/liabilities/get": lambda item: (
        {"accounts": item["accounts"], "liabilities": item["liabilities"]} if "liabilities" in item else None
    ),
    "/investments/holdings/get": lambda item: (
        {"holdings": item["holdings"], "securities": item["securities"]} if "holdings" in item else None
    ),
    "/investments/transactions/get": lambda item: (
        {"investment_transactions": [], "securities": item["securities"]} if "holdings" in item else None
    ),
    "/transactions/get": lambda item: (
        {"transactions": item["transactions"], "total_transactions": len(item["transactions"])}
        if "transactions" in item else None
    ),
    "/transactions/sync": lambda item: (
        {"added": item["transactions"], "modified": [], "removed": [], "next_cursor": "cursor-1", "has_more": False}
        if "transactions" in item else None
    ),
    "/auth/get": lambda item: {"accounts": item["accounts"], **item["auth"]} if "auth" in item else None,
    "/identity/get": lambda item: {"accounts": item["accounts"], "identity": item["identity"]} if "identity" in item else None,
    "/item/get": lambda item: {"item": item["item"]},
    "/item/remove": lambda item: {"request_id": uuid.uuid4().hex[:12]},
}


def create_app(enabled_products: Iterable[str] = DEFAULT_ENABLED_PRODUCTS) -> FastAPI:
    """Build a mock Plaid API; items are addressed as access-sandbox-<fixture name>"""
    enabled = set(enabled_products)
    app = FastAPI(title="Mock Plaid", version="1.0.0")

    async def authenticated_body(request: Request) -> Optional[Dict[str, Any]]:
        if not request.headers.get("PLAID-CLIENT-ID") or not request.headers.get("PLAID-SECRET"):
            return None
        return await request.json()

    @app.post("/link/token/create")
    async def link_token_create(request: Request):
        body = await authenticated_body(request)
        if body is None:
            return plaid_error(400, "INVALID_INPUT", "INVALID_API_KEYS", "invalid client_id or secret provided")

        products = body.get("products") or []
        not_enabled = [p for p in products if p not in enabled]
        if not_enabled:
            names = ", ".join(f'"{p}"' for p in not_enabled)
            return plaid_error(
                400, "INVALID_REQUEST", "INVALID_PRODUCT",
                f"client is not authorized to access the following products: [{names}]",
            )

        expiration = datetime.now(timezone.utc) + timedelta(hours=4)
        return {
            "link_token": f"link-sandbox-{uuid.uuid4()}",
            "expiration": expiration.isoformat(),
            "request_id": uuid.uuid4().hex[:12],
        }

    @app.post("/item/public_token/exchange")
    async def public_token_exchange(request: Request):
        body = await authenticated_body(request)
        if body is None:
            return plaid_error(400, "INVALID_INPUT", "INVALID_API_KEYS", "invalid client_id or secret provided")

        name = str(body.get("public_token", "")).removeprefix("public-sandbox-")
        item = load_item(name)
        if item is None:
            return plaid_error(400, "INVALID_INPUT", "INVALID_PUBLIC_TOKEN", "provided public token is in an invalid format")
        return {"access_token": f"access-sandbox-{name}", "item_id": item["item"]["item_id"]}

    def data_route(path: str, build: Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]):
        async def handler(request: Request):
            body = await authenticated_body(request)
            if body is None:
                return plaid_error(400, "INVALID_INPUT", "INVALID_API_KEYS", "invalid client_id or secret provided")

            name = str(body.get("access_token", "")).removeprefix("access-sandbox-")
            item = load_item(name)
            if item is None:
                return plaid_error(400, "INVALID_INPUT", "INVALID_ACCESS_TOKEN", "provided access token is in an invalid format")

            data = build(item)
            if data is None:
                return plaid_error(
                    400, "ITEM_ERROR", "PRODUCTS_NOT_SUPPORTED",
                    "the requested product is not supported by this institution",
                )
            return data

        app.add_api_route(path, handler, methods=["POST"])

    for path, build in DATA_ENDPOINTS.items():
        data_route(path, build)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
