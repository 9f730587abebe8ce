"""OpenAI-compatible chat completions transport.

Uses OPENAI_API_KEY. Base URL defaults to https://api.openai.com/v1 and can be
pointed at any compatible server with OPENAI_API_BASE.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import httpx

from treedoc.config.defaults import LLM_TEMPERATURE_DEFAULT, OPENAI_API_BASE_DEFAULT
from treedoc.errors import ConfigError, LLMError
from treedoc.timeout_config import TimeoutConfig, get_timeout_config

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Async client for ``POST {base}/chat/completions``.

    One ``httpx.AsyncClient`` is shared by every call; use the client as an
    async context manager (or call ``aclose``) to release it.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = LLM_TEMPERATURE_DEFAULT,
        timeout: Optional[TimeoutConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY missing. Set it in .env or environment.")
        self.base_url = (
            base_url or os.environ.get("OPENAI_API_BASE") or OPENAI_API_BASE_DEFAULT
        ).rstrip("/")
        self.temperature = temperature
        timeout = timeout or get_timeout_config()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout.as_httpx(),
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    async def __call__(self, prompt: str, model: str) -> str:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        try:
            response = await self._client.post("/chat/completions", json=payload)
        except httpx.HTTPError as e:
            raise LLMError(f"{model} request failed: {e}") from e

        if response.status_code >= 400:
            raise LLMError(
                f"{model} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"{model} returned a malformed response: {e}") from e

        usage = data.get("usage") or {}
        logger.debug(
            "%s: %s prompt tokens, %s completion tokens",
            model,
            usage.get("prompt_tokens", "?"),
            usage.get("completion_tokens", "?"),
        )
        return content or ""

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "OpenAIChatClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
