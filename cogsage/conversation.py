"""Conversation log: bounded, append-only history of turns"""

import time
import logging
from typing import Dict, List, Optional

from . import config

logger = logging.getLogger(__name__)

CONVERSATION_NAMESPACE = "conversation"

USER = "user"
ASSISTANT = "assistant"


class ConversationTurn:
    """Single conversation turn"""

    def __init__(self, role: str, content: str, timestamp: float = None,
                 confidence: Optional[float] = None):
        if role not in (USER, ASSISTANT):
            raise ValueError(f"Unknown conversation role: {role!r}")
        self.role = role
        self.content = content
        self.timestamp = timestamp if timestamp is not None else time.time()
        self.confidence = confidence

    def to_dict(self) -> Dict:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ConversationTurn":
        return cls(
            role=data["role"],
            content=data["content"],
            timestamp=data.get("timestamp"),
            confidence=data.get("confidence"),
        )


class ConversationLog:
    """
    Append-only log trimmed to the most recent turns.
    Saving through storage is optional and best-effort.
    """

    def __init__(self, storage=None, max_turns: int = None):
        self.storage = storage
        self.max_turns = max_turns or config.MAX_CONVERSATION_HISTORY
        self.turns: List[ConversationTurn] = []

    def append(self, role: str, content: str, confidence: Optional[float] = None) -> ConversationTurn:
        turn = ConversationTurn(role, content, confidence=confidence)
        self.turns.append(turn)
        if len(self.turns) > self.max_turns:
            self.turns = self.turns[-self.max_turns:]
        self.save()
        return turn

    def recent(self, n: int = 5, role: Optional[str] = None) -> List[ConversationTurn]:
        """Most recent n turns, optionally of a single role"""
        turns = [t for t in self.turns if role is None or t.role == role]
        return turns[-n:] if n else []

    def get_context_string(self, n: int = 5) -> str:
        lines = []
        for turn in self.recent(n):
            prefix = "User" if turn.role == USER else "Assistant"
            lines.append(f"{prefix}: {turn.content}")
        return "\n".join(lines)

    def clear(self):
        self.turns = []
        self.save()
        logger.info("Conversation history cleared")

    def save(self):
        if self.storage is None:
            return
        try:
            self.storage.save(CONVERSATION_NAMESPACE, [t.to_dict() for t in self.turns])
        except Exception as e:
            logger.error(f"Failed to save conversation: {e}")

    def load(self):
        if self.storage is None:
            return
        try:
            records = self.storage.load(CONVERSATION_NAMESPACE)
            self.turns = [ConversationTurn.from_dict(r) for r in records][-self.max_turns:]
            if self.turns:
                logger.info(f"Loaded conversation with {len(self.turns)} turns")
        except Exception as e:
            logger.error(f"Failed to load conversation: {e}")

    def get_summary(self) -> Dict:
        """Get conversation summary"""
        return {
            "total_turns": len(self.turns),
            "user_turns": sum(1 for t in self.turns if t.role == USER),
            "assistant_turns": sum(1 for t in self.turns if t.role == ASSISTANT),
        }

    def __len__(self) -> int:
        return len(self.turns)
