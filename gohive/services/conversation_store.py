from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from gohive.services.completion_service import ChatMessage


class ConversationState(str, Enum):
    # A completed conversation is deleted, so it reads as NOT_STARTED again.
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"


@dataclass
class ConversationSession:
    user_id: str
    flow: str
    messages: List[ChatMessage] = field(default_factory=list)


class ConversationStore:
    """
    In-process map of user id -> active mentor session.

    One session per user id; no locking, so two concurrent messages from
    the same user race on the same history.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, ConversationSession] = {}

    def get(self, user_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(user_id)

    def save(self, session: ConversationSession) -> None:
        self._sessions[session.user_id] = session

    def delete(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    def state(self, user_id: str) -> ConversationState:
        if user_id in self._sessions:
            return ConversationState.IN_PROGRESS
        return ConversationState.NOT_STARTED

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["ConversationSession", "ConversationState", "ConversationStore"]
