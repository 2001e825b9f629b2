"""
OpenRouter
==========
Единственный исходящий клиент прокси. Ключ OpenRouter живёт только здесь.

Тела ответов и сообщения пользователя в UpstreamError не попадают:
там только код статуса или класс сетевой ошибки.
"""

from typing import Any

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from .settings import Settings


class UpstreamError(Exception):
    """OpenRouter ответил не-2xx, недоступен или прислал не JSON."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class OpenRouterClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        headers = {}
        if settings.app_url:
            headers["HTTP-Referer"] = settings.app_url
        if settings.app_title:
            headers["X-Title"] = settings.app_title

        self.model = settings.model
        self.configured = bool(settings.openrouter_api_key)
        # SDK не принимает пустой ключ; без ключа вызовы падают в _call
        self._client = AsyncOpenAI(
            base_url=settings.base_url,
            api_key=settings.openrouter_api_key or "not-configured",
            timeout=settings.upstream_timeout,
            max_retries=0,
            default_headers=headers,
            http_client=http_client,
        )

    async def chat_completion(self, messages: Any, temperature: Any, top_p: Any) -> Any:
        """POST /chat/completions, тело ответа возвращается как есть."""
        body = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "top_p": top_p,
        }
        # low-level post: SDK не трогает ни запрос, ни ответ
        resp = await self._call(lambda: self._client.post("/chat/completions", body=body, cast_to=httpx.Response))
        return self._json(resp)

    async def key_info(self) -> dict:
        """GET /key — лимиты и расход текущего ключа."""
        resp = await self._call(lambda: self._client.get("/key", cast_to=httpx.Response))
        payload = self._json(resp)
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}

    async def close(self):
        await self._client.close()

    async def _call(self, request) -> httpx.Response:
        if not self.configured:
            raise UpstreamError("OPENROUTER_API_KEY is not configured")
        try:
            return await request()
        except APIStatusError as e:
            raise UpstreamError(f"OpenRouter API error: {e.status_code}", e.status_code) from e
        except APIConnectionError as e:
            raise UpstreamError(f"OpenRouter unreachable: {type(e).__name__}") from e

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError("OpenRouter returned non-JSON body", resp.status_code) from e
