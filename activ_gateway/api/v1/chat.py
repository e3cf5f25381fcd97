"""POST /jamari/chat - KPI-aware finance coach backed by several LLM providers"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request

from activ_gateway.api.v1.schemas import ChatRequest, ChatResponse
from activ_gateway.api.v1.summary import build_summary
from activ_gateway.api.dependencies import get_ai_client, get_credential_store, get_plaid_client, get_request_id
from activ_gateway.domain.coach import MAX_MESSAGE_CHARS, SYSTEM_PROMPT, build_context, fuse_replies
from activ_gateway.domain.exceptions import EmptyMessageError, GatewayError
from activ_gateway.infrastructure.clients.ai import AIClient
from activ_gateway.infrastructure.clients.plaid import PlaidClient
from activ_gateway.infrastructure.token_store import CredentialStore

router = APIRouter()


@router.post("/jamari/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    body: Optional[ChatRequest] = None,
    store: CredentialStore = Depends(get_credential_store),
    plaid: PlaidClient = Depends(get_plaid_client),
    ai: AIClient = Depends(get_ai_client),
):
    """
    Answer a coaching question using the user's live KPIs.

    Flow:
    1. Build the KPI summary (zeros when nothing is linked)
    2. Ask every configured AI provider concurrently
    3. Fuse the replies into one answer
    """
    body = body or ChatRequest()
    user_id = body.resolved_user_id
    message = (body.message or "")[:MAX_MESSAGE_CHARS]
    if not message:
        raise EmptyMessageError()

    request_id = get_request_id(request)

    try:
        summary = await build_summary(user_id, store, plaid)
        kpis = summary.kpis.model_dump() if summary.kpis else None

        replies = await ai.ask_all(build_context(kpis, message), SYSTEM_PROMPT)

    except Exception as e:
        logging.error(f"Chat error: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise GatewayError("CHAT_ERROR", 500) from e

    logging.info(
        "Chat answered",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "providers": [name for name, text in replies.items() if text],
        },
    )
    return ChatResponse(
        reply=fuse_replies(replies.values()),
        providers={name: bool(text) for name, text in replies.items()},
    )
