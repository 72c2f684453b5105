from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()

FAILURE_MODES = {"error", "fallback"}


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    app_env: str = os.getenv("APP_ENV", "production")
    deepseek_api_key: Optional[str] = os.getenv("DEEPSEEK_API_KEY")
    deepseek_base_url: str = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
    deepseek_model: str = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
    temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
    max_tokens: int = int(os.getenv("MODEL_MAX_TOKENS", "2000"))
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30"))
    # "error" surfaces upstream failures, "fallback" answers with a canned reply
    upstream_failure_mode: str = os.getenv("UPSTREAM_FAILURE_MODE", "error")
    memory_dir: str = os.getenv("MEMORY_DIR", "/tmp/memory")
    memory_max_turns: int = int(os.getenv("MEMORY_MAX_TURNS", "20"))

    def validate(self) -> None:
        if self.upstream_failure_mode.lower() not in FAILURE_MODES:
            raise ValueError(
                f"UPSTREAM_FAILURE_MODE must be one of {sorted(FAILURE_MODES)}, "
                f"got {self.upstream_failure_mode!r}"
            )
        if self.memory_max_turns < 2:
            raise ValueError(f"MEMORY_MAX_TURNS must be at least 2, got {self.memory_max_turns}")

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}

    @property
    def uses_fallback_reply(self) -> bool:
        return self.upstream_failure_mode.lower() == "fallback"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.validate()
    return settings
