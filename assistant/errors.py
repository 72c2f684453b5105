"""Errors raised while generating a reply, each tied to the HTTP status it maps to."""

from __future__ import annotations

from typing import Optional


class AssistantError(Exception):
    status_code: int = 500
    message: str = "Server error while generating a response."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details


class ConfigurationError(AssistantError):
    status_code = 500
    message = "Server configuration error"


class UpstreamError(AssistantError):
    """The chat-completions call failed in a way we don't classify further."""


class UpstreamAuthError(UpstreamError):
    status_code = 401
    message = "Upstream authentication failed. Check DEEPSEEK_API_KEY."


class UpstreamRateLimitError(UpstreamError):
    status_code = 429
    message = "Upstream rate limit exceeded. Try again later."


class UpstreamTimeoutError(UpstreamError):
    status_code = 408
    message = "Upstream request timed out. Try again."
