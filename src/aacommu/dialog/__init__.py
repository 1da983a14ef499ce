"""Conversation history for AACommu."""

from .log import SPEAKER_PREFIXES, ConversationLog, DialogEntry, Speaker

__all__ = ["ConversationLog", "DialogEntry", "SPEAKER_PREFIXES", "Speaker"]
