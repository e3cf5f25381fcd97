"""LLM provider clients (OpenAI, Anthropic, Gemini) for the JAMARI coach"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from activ_gateway.config import settings
from activ_gateway.infrastructure.observability.metrics import ai_provider_replies_counter

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

TEMPERATURE = 0.3
MAX_TOKENS = 1024


class AIClient:
    """
    Best-effort chat completion across three providers.

    A provider without an API key is skipped. Any failure (HTTP error,
    timeout, unexpected payload) turns into None for that provider; nothing
    is raised to the caller.
    """

    def __init__(
        self,
        openai_api_key: str | None = None,
        anthropic_api_key: str | None = None,
        gemini_api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.openai_api_key = openai_api_key if openai_api_key is not None else settings.openai_api_key
        self.anthropic_api_key = anthropic_api_key if anthropic_api_key is not None else settings.anthropic_api_key
        self.gemini_api_key = gemini_api_key if gemini_api_key is not None else settings.gemini_api_key
        self.openai_model = settings.openai_model
        self.anthropic_model = settings.anthropic_model
        self.gemini_model = settings.gemini_model
        self.timeout = timeout or settings.ai_timeout_seconds
        self.transport = transport

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()

    async def _ask(self, provider: str, call: Callable[[], Awaitable[Optional[str]]]) -> Optional[str]:
        try:
            text = await asyncio.wait_for(call(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logging.warning(f"{provider} timed out after {self.timeout}s", extra={"provider": provider})
            text = None
        except (httpx.HTTPError, AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logging.warning(f"{provider} failed: {e}", extra={"provider": provider})
            text = None

        ai_provider_replies_counter.labels(provider=provider, outcome="ok" if text else "empty").inc()
        return text

    async def ask_openai(self, prompt: str, system: str) -> Optional[str]:
        if not self.openai_api_key:
            return None

        async def call() -> Optional[str]:
            data = await self._post(
                OPENAI_URL,
                {
                    "model": self.openai_model,
                    "temperature": TEMPERATURE,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                },
                {"Authorization": f"Bearer {self.openai_api_key}"},
            )
            return (data["choices"][0]["message"]["content"] or "").strip() or None

        return await self._ask("openai", call)

    async def ask_anthropic(self, prompt: str, system: str) -> Optional[str]:
        if not self.anthropic_api_key:
            return None

        async def call() -> Optional[str]:
            data = await self._post(
                ANTHROPIC_URL,
                {
                    "model": self.anthropic_model,
                    "max_tokens": MAX_TOKENS,
                    "system": system,
                    "messages": [{"role": "user", "content": [{"type": "text", "text": prompt}]}],
                },
                {"x-api-key": self.anthropic_api_key, "anthropic-version": ANTHROPIC_VERSION},
            )
            return (data["content"][0]["text"] or "").strip() or None

        return await self._ask("anthropic", call)

    async def ask_gemini(self, prompt: str, system: str) -> Optional[str]:
        if not self.gemini_api_key:
            return None

        async def call() -> Optional[str]:
            url = GEMINI_URL.format(model=quote(self.gemini_model, safe=""))
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    params={"key": self.gemini_api_key},
                    json={
                        "contents": [{"parts": [{"text": f"{system}\n\n{prompt}"}]}],
                        "generationConfig": {"temperature": TEMPERATURE, "maxOutputTokens": MAX_TOKENS},
                    },
                )
                response.raise_for_status()
                data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            return " ".join(p.get("text", "") for p in parts).strip() or None

        return await self._ask("gemini", call)

    async def ask_all(self, prompt: str, system: str) -> Dict[str, Optional[str]]:
        """Ask every configured provider concurrently"""
        openai, anthropic, gemini = await asyncio.gather(
            self.ask_openai(prompt, system),
            self.ask_anthropic(prompt, system),
            self.ask_gemini(prompt, system),
        )
        return {"openai": openai, "anthropic": anthropic, "gemini": gemini}
