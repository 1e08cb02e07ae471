from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Author = Literal["user", "assistant"]


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    author: Author
    text: str


@dataclass
class TranscriptAccumulator:
    """Collects partial transcript fragments until a turn completes."""

    turns: list[ConversationTurn] = field(default_factory=list)
    _user: str = ""
    _assistant: str = ""

    def add_user(self, text: str) -> None:
        self._user += text

    def add_assistant(self, text: str) -> None:
        self._assistant += text

    def complete_turn(self) -> list[ConversationTurn]:
        """Flush the pending fragments, user before assistant."""

        completed: list[ConversationTurn] = []
        if self._user.strip():
            completed.append(ConversationTurn(author="user", text=self._user.strip()))
        if self._assistant.strip():
            completed.append(ConversationTurn(author="assistant", text=self._assistant.strip()))
        self.turns.extend(completed)
        self._user = ""
        self._assistant = ""
        return completed

    def reset(self) -> None:
        self.turns.clear()
        self._user = ""
        self._assistant = ""
