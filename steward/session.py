"""In-memory conversation session with sliding window."""

import logging
from dataclasses import dataclass, field

from steward.config import settings
from steward.llm.types import ConversationTurn

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Conversation history for a single chat."""

    turns: list[ConversationTurn] = field(default_factory=list)
    window_size: int = field(default_factory=lambda: settings.conversation_window_size)

    def add(self, turn: ConversationTurn) -> None:
        """Append a turn and trim to the sliding window.

        The window never starts on an assistant turn, since the model
        expects history to open with the user.
        """
        self.turns.append(turn)
        if len(self.turns) > self.window_size:
            self.turns = self.turns[-self.window_size :]
        while self.turns and self.turns[0].role != "user":
            self.turns.pop(0)

    def add_exchange(self, user_text: str, assistant_text: str) -> None:
        self.add(ConversationTurn.user(user_text))
        self.add(ConversationTurn.assistant(assistant_text))

    def clear(self) -> int:
        """Clear all turns. Returns the count of cleared turns."""
        count = len(self.turns)
        self.turns.clear()
        return count

    def history(self) -> tuple[ConversationTurn, ...]:
        return tuple(self.turns)
