"""Local suggestion module for AACommu.

Provides the deterministic fallback engine used when the remote
suggestion service is unreachable.
"""

from .fallback import FallbackSuggester, suggest
from .tables import DEFAULT_KEY, NEXT_TOKENS, OPENERS

__all__ = [
    "DEFAULT_KEY",
    "FallbackSuggester",
    "NEXT_TOKENS",
    "OPENERS",
    "suggest",
]
