"""
Minimal client for an OpenAI-compatible `/chat/completions` endpoint.

Provider failures are mapped onto the service error taxonomy:

- 400 -> ValidationError("Invalid OpenAI model or request")
- 429 -> RateLimitError("OpenAI API rate limit exceeded")
- anything else (other statuses, transport errors, malformed bodies)
  -> UpstreamError with the generic internal message
"""

from typing import Any, Dict, List

import httpx

from gohive.errors import RateLimitError, UpstreamError, ValidationError
from gohive.logging_config import logger
from gohive.log_sanitizer import truncate_for_log

INVALID_REQUEST_MESSAGE = "Invalid OpenAI model or request"
PROVIDER_RATE_LIMIT_MESSAGE = "OpenAI API rate limit exceeded"

ChatMessage = Dict[str, str]


class CompletionClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None,
        model: str,
        temperature: float,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.model = model
        self.temperature = temperature

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def complete(self, messages: List[ChatMessage], *, max_tokens: int) -> str:
        """Send the whole message sequence and return the first choice's text."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }
        try:
            resp = await self.client.post(
                "/chat/completions", headers=self._headers(), json=payload
            )
        except httpx.HTTPError as exc:
            logger.warning("Completion request failed: %s", exc)
            raise UpstreamError() from exc

        if resp.status_code >= 400:
            logger.warning(
                "Completion provider returned %s: %s",
                resp.status_code,
                truncate_for_log(resp.text),
            )
            if resp.status_code == 400:
                raise ValidationError(INVALID_REQUEST_MESSAGE)
            if resp.status_code == 429:
                raise RateLimitError(PROVIDER_RATE_LIMIT_MESSAGE)
            raise UpstreamError()

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning(
                "Unexpected completion payload: %s", truncate_for_log(resp.text)
            )
            raise UpstreamError() from exc
        return content or ""


__all__ = ["CompletionClient", "ChatMessage"]
