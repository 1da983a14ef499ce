"""Conversation log of finalized utterances.

Records what the assisted user said and what the partner said, in order.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Speaker(Enum):
    """Who produced an utterance."""

    SELF = "self"
    PARTNER = "partner"


SPEAKER_PREFIXES: dict[Speaker, str] = {
    Speaker.SELF: "나",
    Speaker.PARTNER: "상대방",
}


@dataclass(frozen=True)
class DialogEntry:
    """A single finalized utterance."""

    speaker: Speaker
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def display(self) -> str:
        """Format the entry for display, e.g. ``나: 감사합니다``."""
        return f"{SPEAKER_PREFIXES[self.speaker]}: {self.text}"

    def to_dict(self) -> dict[str, str]:
        """Convert entry to dictionary for serialization."""
        return {
            "speaker": self.speaker.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


class ConversationLog:
    """Append-only ordered record of a conversation.

    ``append`` is the only mutator; ``clear`` is reserved for the start of a
    new conversation.

    Example:
        log = ConversationLog()
        log.append(Speaker.PARTNER, "뭘 주문하시겠어요?")
        log.append(Speaker.SELF, "불고기 주세요")
        log.entries(limit=1)  # last entry only
    """

    def __init__(self) -> None:
        """Initialize an empty log."""
        self._entries: list[DialogEntry] = []

    def append(self, speaker: Speaker | str, text: str) -> DialogEntry:
        """Append an utterance.

        Args:
            speaker: Speaker or its tag ("self" / "partner").
            text: Utterance text.

        Returns:
            The stored entry.
        """
        entry = DialogEntry(speaker=Speaker(speaker), text=text)
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def entries(self, limit: int | None = None) -> list[DialogEntry]:
        """Get entries in chronological order.

        Args:
            limit: If given, only the last ``limit`` entries are returned.

        Returns:
            Copy of the selected entries.
        """
        if limit is None:
            return self._entries.copy()
        if limit <= 0:
            return []
        return self._entries[-limit:]

    def display_lines(self, limit: int | None = None) -> list[str]:
        """Get display strings for the selected entries."""
        return [entry.display() for entry in self.entries(limit)]

    @property
    def last(self) -> DialogEntry | None:
        """Get the most recent entry."""
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DialogEntry]:
        return iter(self._entries.copy())


__all__ = ["ConversationLog", "DialogEntry", "SPEAKER_PREFIXES", "Speaker"]
