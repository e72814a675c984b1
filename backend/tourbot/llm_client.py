from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx

from .settings import Settings, settings

logger = logging.getLogger(__name__)

DETAIL_LIMIT = 200


class GeneratorError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail[:DETAIL_LIMIT]


class GeneratorNotConfigured(GeneratorError):
    pass


class GeneratorAuthError(GeneratorError):
    pass


class GeneratorRateLimited(GeneratorError):
    pass


class GeneratorUnavailable(GeneratorError):
    pass


class ChatGenerator(Protocol):
    async def generate(self, system: str, user: str) -> str: ...


def _reply_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""


class OpenAICompatibleGenerator:
    """Chat-completions client for OpenRouter or any OpenAI-compatible API.

    The ``httpx.AsyncClient`` is created on first use and reused for every
    call until :meth:`aclose`. Failures are classified into the
    ``GeneratorError`` subclasses; nothing is retried here.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.config.LLM_API_KEY)

    def _headers(self) -> dict[str, str]:
        if not self.config.LLM_API_KEY:
            raise GeneratorNotConfigured("LLM_API_KEY not configured")
        headers = {
            "Authorization": f"Bearer {self.config.LLM_API_KEY}",
            "Content-Type": "application/json",
        }
        if self.config.LLM_PROVIDER.lower() == "openrouter":
            headers["HTTP-Referer"] = self.config.APP_PUBLIC_URL
            headers["X-Title"] = "Tour Chatbot"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    timeout = httpx.Timeout(
                        self.config.LLM_TIMEOUT_SECONDS,
                        connect=self.config.LLM_CONNECT_TIMEOUT_SECONDS,
                    )
                    self._client = httpx.AsyncClient(
                        base_url=self.config.llm_base_url,
                        timeout=timeout,
                        transport=self._transport,
                    )
        return self._client

    async def generate(self, system: str, user: str) -> str:
        headers = self._headers()
        payload = {
            "model": self.config.LLM_MODEL,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.config.LLM_TEMPERATURE,
        }
        client = await self._get_client()
        try:
            response = await client.post("/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Generator request failed: %s", exc)
            raise GeneratorUnavailable(f"Request failed: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            logger.error("Generator rejected credentials (status %d)", status)
            raise GeneratorAuthError(
                "Authentication with the LLM API failed", status=status, detail=response.text
            )
        if status == 429:
            logger.warning("Generator rate limited")
            raise GeneratorRateLimited(
                "LLM API rate limit reached", status=status, detail=response.text
            )
        if status >= 400:
            logger.warning("Generator error %d: %s", status, response.text[:DETAIL_LIMIT])
            raise GeneratorUnavailable(
                f"LLM API error {status}", status=status, detail=response.text
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise GeneratorUnavailable("Invalid JSON from LLM API", status=status) from exc
        return _reply_content(data)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
