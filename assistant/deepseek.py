from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from assistant.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
    UpstreamTimeoutError,
)
from config.settings import Settings


logger = logging.getLogger(__name__)


def _extract_reply(data: Any) -> str:
    """Pull the reply text out of a completion; no choices means an empty reply."""
    try:
        choices = data.get("choices")
        if not choices:
            return ""
        content = (choices[0].get("message") or {}).get("content")
    except (AttributeError, KeyError, IndexError, TypeError) as exc:
        raise UpstreamError(details=f"Unexpected response shape from DeepSeek: {exc!r}") from exc
    if content is None:
        return ""
    if not isinstance(content, str):
        raise UpstreamError(details=f"Unexpected reply content type: {type(content).__name__}")
    return content


def _error_for_status(response: httpx.Response) -> UpstreamError:
    details = f"HTTP {response.status_code}: {response.text[:500]}"
    if response.status_code == 401:
        return UpstreamAuthError(details=details)
    if response.status_code == 429:
        return UpstreamRateLimitError(details=details)
    return UpstreamError(details=details)


class DeepSeekClient:
    """Single-shot client for the DeepSeek chat-completions API.

    One attempt per call, bounded by ``timeout``; retries are left to the caller.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com",
        model: str = "deepseek-chat",
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeepSeekClient":
        return cls(
            api_key=settings.deepseek_api_key or "",
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.upstream_timeout,
        )

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": False,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async def _post() -> httpx.Response:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.post(self.endpoint, json=payload, headers=headers)

        # httpx times each phase separately; wait_for bounds the whole call
        try:
            response = await asyncio.wait_for(_post(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError(details=f"No reply within {self.timeout}s") from exc
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(details=str(exc)) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(details=f"DeepSeek API call failed: {exc}") from exc

        if response.is_error:
            raise _error_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(details=f"Invalid JSON from DeepSeek: {exc}") from exc

        reply = _extract_reply(data)
        logger.info("DeepSeek responded: status=%s reply_len=%s", response.status_code, len(reply))
        return reply
