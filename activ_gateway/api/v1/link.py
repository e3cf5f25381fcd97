"""Plaid Link flow - link token creation, token exchange, unlink and webhooks"""

import time
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Request, Response

from activ_gateway.api.v1.schemas import (
    ExchangeRequest,
    ExchangeResponse,
    LinkTokenRequest,
    LinkTokenResponse,
    OkResponse,
    UserRequest,
)
from activ_gateway.api.dependencies import get_credential_store, get_plaid_client, get_request_id
from activ_gateway.config import settings
from activ_gateway.domain.exceptions import MissingPublicTokenError, PlaidAPIError
from activ_gateway.domain.models import LinkRequestTemplate
from activ_gateway.domain.negotiator import negotiate
from activ_gateway.domain.products import sanitize_products
from activ_gateway.infrastructure.clients.plaid import PlaidClient
from activ_gateway.infrastructure.observability.logging import log_link_token
from activ_gateway.infrastructure.observability.metrics import record_link_token
from activ_gateway.infrastructure.token_store import CredentialStore

router = APIRouter()


@router.post("/plaid/link_token/create", response_model=LinkTokenResponse)
async def create_link_token(
    request: Request,
    body: Optional[LinkTokenRequest] = None,
    plaid: PlaidClient = Depends(get_plaid_client),
):
    """
    Create a Plaid Link token.

    The requested products are trimmed to whatever Plaid accepts for these
    credentials; `products_used` reports what was actually granted.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    body = body or LinkTokenRequest()
    user_id = body.resolved_user_id

    template = LinkRequestTemplate(
        user_id=user_id,
        client_name=settings.client_name,
        language="en",
        country_codes=tuple(settings.country_codes),
        redirect_uri=settings.plaid_redirect_uri,
        webhook=settings.webhook_url,
    )
    requested = sanitize_products(body.products)

    try:
        session = await negotiate(plaid, template, body.products, max_attempts=settings.link_max_attempts)
    except PlaidAPIError:
        record_link_token(requested, None, 0)
        log_link_token(request_id, user_id, requested, None, 0, (time.time() - start_time) * 1000)
        raise

    record_link_token(requested, session.products_used, session.attempts)
    log_link_token(
        request_id, user_id, requested, session.products_used, session.attempts, (time.time() - start_time) * 1000
    )

    return LinkTokenResponse(
        link_token=session.link_token,
        expiration=session.expiration,
        userId=user_id,
        products_used=session.products_used,
    )


@router.post("/plaid/exchange_public_token", response_model=ExchangeResponse)
async def exchange_public_token(
    request: Request,
    body: Optional[ExchangeRequest] = None,
    plaid: PlaidClient = Depends(get_plaid_client),
    store: CredentialStore = Depends(get_credential_store),
):
    """Exchange a Link public token and keep the access token for the user"""
    body = body or ExchangeRequest()
    if not body.public_token:
        raise MissingPublicTokenError()

    user_id = body.resolved_user_id
    data = await plaid.exchange_public_token(body.public_token)
    access_token = data.get("access_token")
    if not access_token:
        raise PlaidAPIError("PLAID_ERROR", "exchange response has no access_token", http_status=502, payload=data)
    store.set(user_id, access_token)

    logging.info(
        "Item linked",
        extra={"request_id": get_request_id(request), "user_id": user_id, "item_id": data.get("item_id")},
    )
    return ExchangeResponse(item_id=data.get("item_id"), stored_for_user=user_id)


@router.post("/plaid/unlink", response_model=OkResponse, response_model_exclude_none=True)
async def unlink(
    body: Optional[UserRequest] = None,
    plaid: PlaidClient = Depends(get_plaid_client),
    store: CredentialStore = Depends(get_credential_store),
):
    """Remove the user's item at Plaid, then forget the token"""
    user_id = (body or UserRequest()).resolved_user_id
    token = store.get(user_id)
    if not token:
        return OkResponse(message="Nothing to unlink")

    await plaid.remove_item(token)
    store.delete(user_id)
    return OkResponse()


@router.post("/user/delete", response_model=OkResponse, response_model_exclude_none=True)
def delete_user(
    body: Optional[UserRequest] = None,
    store: CredentialStore = Depends(get_credential_store),
):
    """Purge everything held for the user"""
    store.delete((body or UserRequest()).resolved_user_id)
    return OkResponse()


@router.post("/plaid/webhook")
def plaid_webhook(payload: Optional[Dict[str, Any]] = Body(None)):
    logging.info("Plaid webhook", extra={"webhook": payload})
    return Response(status_code=200)
