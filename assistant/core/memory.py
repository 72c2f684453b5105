"""Per-user conversation memory kept as one JSON file per user id.

Storage is best effort: the directory may be wiped between invocations and
two requests for the same user race on load/save (last writer wins). Load
and save never raise; failures are logged and the request carries on with
the in-memory record.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from assistant.core.prompt import SYSTEM_PROMPT


logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 20


class ChatTurn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ConversationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    last_project: Optional[str] = Field(default=None, alias="lastProject")
    last_task: Optional[str] = Field(default=None, alias="lastTask")
    conversation: List[ChatTurn] = Field(default_factory=list)

    @field_validator("conversation")
    @classmethod
    def _starts_with_system_turn(cls, turns: List[ChatTurn]) -> List[ChatTurn]:
        if not turns or turns[0].role != "system":
            raise ValueError("conversation must start with a system turn")
        return turns

    def add_turn(self, role: str, content: str) -> None:
        self.conversation.append(ChatTurn(role=role, content=content))


class LoadStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNREADABLE = "unreadable"


@dataclass
class LoadResult:
    record: ConversationRecord
    status: LoadStatus


def default_record(user_id: str) -> ConversationRecord:
    return ConversationRecord(
        user_id=user_id,
        conversation=[ChatTurn(role="system", content=SYSTEM_PROMPT)],
    )


def truncate(record: ConversationRecord, limit: int = DEFAULT_MAX_TURNS) -> None:
    """Keep the system turn plus the newest ``limit - 1`` turns."""
    if limit < 2:
        raise ValueError(f"history limit must be at least 2, got {limit}")
    if len(record.conversation) <= limit:
        return
    system_turn = record.conversation[0]
    record.conversation = [system_turn] + record.conversation[-(limit - 1):]


class MemoryStore:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def init(self) -> None:
        try:
            if not self.root.exists():
                self.root.mkdir(parents=True, exist_ok=True)
                logger.info("Created memory directory: %s", self.root)
        except OSError as exc:
            logger.error("Failed to create memory directory %s: %s", self.root, exc)

    def path_for(self, user_id: str) -> Path:
        # one file per distinct id; the digest also keeps ids out of the path
        key = hashlib.sha256(user_id.encode("utf-8", "surrogatepass")).hexdigest()
        return self.root / f"memory_{key}.json"

    def load(self, user_id: str) -> LoadResult:
        path = self.path_for(user_id)
        if not path.exists():
            return LoadResult(default_record(user_id), LoadStatus.NOT_FOUND)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            record = ConversationRecord.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Could not load memory for %s: %s", user_id, exc)
            return LoadResult(default_record(user_id), LoadStatus.UNREADABLE)
        if record.user_id != user_id:
            logger.warning("Memory file for %s belongs to %s, ignoring it", user_id, record.user_id)
            return LoadResult(default_record(user_id), LoadStatus.UNREADABLE)
        return LoadResult(record, LoadStatus.FOUND)

    def save(self, user_id: str, record: ConversationRecord) -> bool:
        """Write the record atomically; the previous file survives any failure."""
        path = self.path_for(user_id)
        tmp_path = None
        try:
            payload = record.model_dump(by_alias=True)
            data = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
            fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=".memory_", suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not save memory for %s: %s", user_id, exc)
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.remove(tmp_path)
            return False
        return True
