from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from assistant.core.language import detect_language, tone_instruction
from assistant.core.memory import ConversationRecord, MemoryStore, truncate
from assistant.core.prompt import FALLBACK_REPLY, strip_disclaimers
from assistant.errors import ConfigurationError, UpstreamError
from config.settings import Settings


logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "default"


class ChatClient(Protocol):
    async def complete(self, messages: List[Dict[str, str]]) -> str:
        ...


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, strict=True)

    prompt: str = Field(..., description="User's latest message")
    user_id: str = Field(default=DEFAULT_USER_ID, alias="userId")
    project: Optional[str] = Field(default=None, description="Caller-supplied project tag")

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    @field_validator("user_id", mode="before")
    @classmethod
    def _default_user(cls, value):
        return value or DEFAULT_USER_ID


@dataclass
class ChatResult:
    reply: str
    record: ConversationRecord

    def to_response(self) -> Dict:
        return {
            "reply": self.reply,
            "memory": {
                "lastProject": self.record.last_project,
                "conversationLength": len(self.record.conversation),
                "userId": self.record.user_id,
            },
        }


def build_messages(record: ConversationRecord, instruction: str) -> List[Dict[str, str]]:
    """Copy the stored conversation, adding the tone instruction to the system turn."""
    messages = [turn.model_dump() for turn in record.conversation]
    if messages and messages[0]["role"] == "system":
        messages[0]["content"] += f"\n\n{instruction}"
    return messages


async def generate_reply(
    request: GenerateRequest,
    *,
    store: MemoryStore,
    client: ChatClient,
    settings: Settings,
) -> ChatResult:
    if not settings.deepseek_api_key:
        raise ConfigurationError("Server configuration error: DEEPSEEK_API_KEY not set")

    user_id = request.user_id
    loaded = store.load(user_id)
    record = loaded.record
    logger.info(
        "Memory for %s: %s (%s turns)", user_id, loaded.status.value, len(record.conversation)
    )

    if request.project:
        record.last_project = request.project
    record.last_task = request.prompt
    record.add_turn("user", request.prompt)

    language = detect_language(request.prompt)
    logger.info("Detected language: %s", language.value)
    messages = build_messages(record, tone_instruction(language))

    try:
        reply = await client.complete(messages)
    except UpstreamError as exc:
        if not settings.uses_fallback_reply:
            logger.warning("DeepSeek API call failed: %s (%s)", exc.message, exc.details)
            truncate(record, settings.memory_max_turns)
            store.save(user_id, record)
            raise
        logger.warning("DeepSeek API call failed, using fallback reply: %s", exc.details)
        reply = FALLBACK_REPLY

    clean_text = strip_disclaimers(reply or FALLBACK_REPLY)
    record.add_turn("assistant", clean_text)
    truncate(record, settings.memory_max_turns)
    store.save(user_id, record)

    return ChatResult(reply=clean_text, record=record)
