"""Unit tests for the local fallback suggestion engine."""

import pytest

from aacommu.scenarios import Context
from aacommu.suggest import DEFAULT_KEY, NEXT_TOKENS, FallbackSuggester, suggest


class TestSuggestResolution:
    """Tests for the token -> context default -> global default order."""

    def test_exact_token_match(self) -> None:
        """Test that a known token returns its own entry."""
        assert suggest("restaurant", "불고기") == ["주세요", "랑", "정식을", "세트를"]

    def test_accepts_context_enum(self) -> None:
        """Test that Context members and tags resolve the same table."""
        assert suggest(Context.HOSPITAL, "머리가") == suggest("hospital", "머리가")

    def test_unknown_token_uses_context_default(self) -> None:
        """Test that an unknown token falls back to the context default."""
        assert suggest("restaurant", "없는단어") == ["주세요", "랑", "을", "이", "감사합니다"]

    def test_no_token_uses_context_default(self) -> None:
        """Test that the start of a sentence uses the context default."""
        assert suggest("hospital") == ["아파요", "불편해요", "때문에", "왔어요", "하고"]

    def test_unknown_context_uses_global_default(self) -> None:
        """Test that an unrecognized context uses the global default list."""
        expected = ["네", "아니오", "감사합니다", "부탁드립니다", "죄송합니다"]
        assert suggest("spaceship", "불고기") == expected
        assert suggest("spaceship") == expected

    def test_context_without_table_uses_global_default(self) -> None:
        """Test that a known context with no table uses the global default."""
        assert suggest(Context.BANK, "네") == list(NEXT_TOKENS[DEFAULT_KEY][DEFAULT_KEY])

    def test_no_context_uses_global_table(self) -> None:
        """Test that no context looks tokens up in the global table."""
        assert suggest(None, "도움이") == ["필요해요", "좀", "주세요", "감사합니다"]

    def test_context_tag_is_case_insensitive(self) -> None:
        """Test that context tags are normalized."""
        assert suggest(" Restaurant ", "메뉴") == ["추천해", "좀", "보여", "주세요"]

    @pytest.mark.parametrize("context", [*NEXT_TOKENS.keys(), "unknown", None])
    def test_unknown_token_falls_back_for_every_context(self, context: str | None) -> None:
        """Test fallback to the context default for every table."""
        key = DEFAULT_KEY if context in (None, "unknown") else context
        assert suggest(context, "~") == list(NEXT_TOKENS[key][DEFAULT_KEY])

    @pytest.mark.parametrize(
        ("context", "token"),
        [
            (context, token)
            for context, table in NEXT_TOKENS.items()
            for token in [*table.keys(), None]
        ],
    )
    def test_never_empty(self, context: str, token: str | None) -> None:
        """Test that every table entry yields candidates."""
        assert len(suggest(context, token)) > 0

    def test_returns_fresh_list(self) -> None:
        """Test that callers cannot mutate the tables through the result."""
        first = suggest("restaurant", "불고기")
        first.append("mutated")
        assert suggest("restaurant", "불고기") == ["주세요", "랑", "정식을", "세트를"]


class TestFallbackSuggester:
    """Tests for custom tables and openers."""

    def test_custom_tables(self) -> None:
        """Test that custom tables are used."""
        suggester = FallbackSuggester(
            tables={
                "cafe": {"커피": ("주세요",), DEFAULT_KEY: ("네",)},
                DEFAULT_KEY: {DEFAULT_KEY: ("감사합니다",)},
            }
        )
        assert suggester.suggest("cafe", "커피") == ["주세요"]
        assert suggester.suggest("cafe", "차") == ["네"]
        assert suggester.suggest("restaurant", "불고기") == ["감사합니다"]

    def test_context_without_default_uses_global_default(self) -> None:
        """Test that a context table lacking a default entry falls through."""
        suggester = FallbackSuggester(
            tables={
                "cafe": {"커피": ("주세요",)},
                DEFAULT_KEY: {DEFAULT_KEY: ("감사합니다",)},
            }
        )
        assert suggester.suggest("cafe", "차") == ["감사합니다"]

    def test_missing_global_default_raises(self) -> None:
        """Test that tables without a global default are rejected."""
        with pytest.raises(ValueError, match="global default"):
            FallbackSuggester(tables={"cafe": {DEFAULT_KEY: ("네",)}})

    def test_empty_global_default_raises(self) -> None:
        """Test that an empty global default is rejected."""
        with pytest.raises(ValueError):
            FallbackSuggester(tables={DEFAULT_KEY: {DEFAULT_KEY: ()}})

    def test_opener_for_known_context(self) -> None:
        """Test canned partner prompt for a context."""
        transcript, candidates = FallbackSuggester().opener("restaurant")
        assert transcript == "뭘 주문하시겠어요?"
        assert candidates[0] == "저는"

    def test_opener_for_unknown_context(self) -> None:
        """Test that contexts without an opener use the default one."""
        transcript, candidates = FallbackSuggester().opener(Context.CAFE)
        assert transcript == "무엇을 도와드릴까요?"
        assert candidates
