"""AI / LLM integration client.

Talks to an OpenAI-compatible chat-completions endpoint. Keys prefixed with
``mock_`` (the development default) or left empty mean no backend is
configured; callers are expected to check ``is_configured`` and use their
deterministic path instead.
"""

from __future__ import annotations

import httpx

from sasktask.common.exceptions import ExternalServiceError
from sasktask.config import settings
from sasktask.integrations.base import BaseIntegration


def _is_mock() -> bool:
    return not settings.AI_API_KEY or settings.AI_API_KEY.startswith("mock_")


class AIClient(BaseIntegration):
    """Chat-completions client with a bounded wait on every call."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("ai")
        self._base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self.model = model or settings.AI_MODEL
        self._timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return not _is_mock()

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def health_check(self) -> bool:
        if not self.is_configured:
            self.logger.info("AI client health check: not configured")
            return False
        try:
            async with self._client(10) as client:
                resp = await client.get(
                    f"{self._base_url}/models",
                    headers={"Authorization": f"Bearer {settings.AI_API_KEY}"},
                )
                return resp.status_code == 200
        except httpx.HTTPError as e:
            self.logger.error("AI health check failed: %s", e)
            return False

    async def chat(self, system: str, user: str, temperature: float | None = None) -> str:
        """Return the assistant message text.

        Raises ``ExternalServiceError`` on timeouts, transport errors, non-2xx
        responses and replies without a message body.
        """
        if not self.is_configured:
            raise ExternalServiceError("ai", "no API key configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": settings.AI_TEMPERATURE if temperature is None else temperature,
        }
        try:
            async with self._client(self._timeout) as client:
                resp = await client.post(
                    f"{self._base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {settings.AI_API_KEY}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceError("ai", f"timed out after {self._timeout:.0f}s") from e
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError("ai", f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError("ai", str(e)) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("ai", "response has no message content") from e
        if not content:
            raise ExternalServiceError("ai", "empty message content")

        self.logger.info("AI chat completed (%d chars)", len(content))
        return content
