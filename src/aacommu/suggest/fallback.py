"""Local fallback suggestion engine.

Produces plausible next tokens without the remote service so the user is
never left without options because the network is down.
"""

from collections.abc import Mapping

from ..scenarios import Context
from .tables import DEFAULT_KEY, NEXT_TOKENS, OPENERS

ContextKey = Context | str | None


def _context_key(context: ContextKey) -> str | None:
    """Normalize a context argument to a table key.

    Returns None for tags that are not present in the table.
    """
    if context is None:
        return DEFAULT_KEY
    key = context.value if isinstance(context, Context) else context.strip().lower()
    return key if key in NEXT_TOKENS else None


class FallbackSuggester:
    """Deterministic table-driven suggestion lookup.

    Resolution order for ``suggest(context, last_token)``:

    1. exact ``last_token`` entry in the context's table
    2. the context's ``default`` entry (also used when ``last_token`` is None)
    3. the global ``default`` entry (unrecognized context)

    Example:
        suggester = FallbackSuggester()
        suggester.suggest("restaurant", "불고기")
        # ['주세요', '랑', '정식을', '세트를']
    """

    def __init__(
        self,
        tables: Mapping[str, Mapping[str, tuple[str, ...]]] | None = None,
        openers: Mapping[str, tuple[str, tuple[str, ...]]] | None = None,
    ) -> None:
        """Initialize the suggester.

        Args:
            tables: Context -> token -> candidates mapping. Must contain a
                non-empty global ``default`` entry.
            openers: Context -> (transcript, candidates) used for canned
                partner prompts.

        Raises:
            ValueError: If the global default entry is missing or empty.
        """
        self._tables = tables if tables is not None else NEXT_TOKENS
        self._openers = openers if openers is not None else OPENERS

        global_table = self._tables.get(DEFAULT_KEY, {})
        if not global_table.get(DEFAULT_KEY):
            raise ValueError("Suggestion tables need a non-empty global default entry")

    @property
    def global_default(self) -> list[str]:
        """Get the global default candidate list."""
        return list(self._tables[DEFAULT_KEY][DEFAULT_KEY])

    def suggest(self, context: ContextKey, last_token: str | None = None) -> list[str]:
        """Suggest next tokens for a context and the last chosen token.

        Args:
            context: Conversation context (None means no context).
            last_token: Most recently chosen token, or None at sentence start.

        Returns:
            Non-empty ordered list of candidate tokens.
        """
        key = _context_key(context)
        if key is None:
            return self.global_default

        table = self._tables[key]
        if last_token is not None:
            candidates = table.get(last_token)
            if candidates:
                return list(candidates)

        candidates = table.get(DEFAULT_KEY)
        if candidates:
            return list(candidates)
        return self.global_default

    def opener(self, context: ContextKey) -> tuple[str, list[str]]:
        """Get a canned partner prompt and first candidates for a context."""
        key = _context_key(context)
        if key is None or key not in self._openers:
            key = DEFAULT_KEY
        transcript, candidates = self._openers[key]
        return transcript, list(candidates)


_default_suggester = FallbackSuggester()


def suggest(context: ContextKey, last_token: str | None = None) -> list[str]:
    """Suggest next tokens using the built-in tables."""
    return _default_suggester.suggest(context, last_token)


__all__ = ["FallbackSuggester", "suggest"]
