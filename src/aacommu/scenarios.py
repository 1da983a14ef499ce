"""Conversation scenarios (contexts), roles and preset phrases.

A context frames the conversation (restaurant, hospital, ...). Each context
offers the roles the assisted user can take and a list of complete preset
sentences that can be spoken without incremental composition.
"""

from dataclasses import dataclass
from enum import Enum


class Context(Enum):
    """Known conversation scenarios."""

    RESTAURANT = "restaurant"
    HOSPITAL = "hospital"
    CLASSROOM = "classroom"
    CAFE = "cafe"
    STORE = "store"
    BANK = "bank"


@dataclass(frozen=True)
class Role:
    """A stance the assisted user takes within a context."""

    id: str
    label: str


GENERIC_LABEL = "대화"

CONTEXT_LABELS: dict[Context, str] = {
    Context.RESTAURANT: "식당",
    Context.HOSPITAL: "병원",
    Context.CLASSROOM: "교실",
    Context.CAFE: "카페",
    Context.STORE: "상점",
    Context.BANK: "은행",
}

# First role of each context is the default.
CONTEXT_ROLES: dict[Context, tuple[Role, ...]] = {
    Context.RESTAURANT: (Role("customer", "고객"),),
    Context.HOSPITAL: (Role("patient", "환자"), Role("visitor", "방문객")),
    Context.CLASSROOM: (Role("student", "학생"),),
    Context.CAFE: (Role("customer", "손님"),),
    Context.STORE: (Role("customer", "손님"),),
    Context.BANK: (Role("customer", "고객"),),
}

COMMON_PHRASES: tuple[str, ...] = (
    "감사합니다",
    "네",
    "아니오",
    "죄송합니다",
)

PRESET_SENTENCES: dict[Context, tuple[str, ...]] = {
    Context.RESTAURANT: (
        "물을 주세요",
        "메뉴를 볼 수 있을까요?",
        "계산서 주세요",
        "추천 메뉴가 있나요?",
        "이거 주문할게요",
    ),
    Context.HOSPITAL: (
        "예약이 있습니다",
        "통증이 있어요",
        "약을 받고 싶습니다",
        "진료가 필요합니다",
        "의사를 만나고 싶어요",
    ),
    Context.CLASSROOM: (
        "질문이 있습니다",
        "이해가 안 됩니다",
        "도움이 필요해요",
        "다시 설명해 주세요",
        "확인하고 싶습니다",
    ),
}

# Spoken straight away, outside of any conversation.
QUICK_PHRASES: tuple[str, ...] = (
    "안녕하세요",
    "도와주세요",
    "감사합니다",
    "네",
    "아니오",
    "죄송합니다",
)


def parse_context(value: "Context | str") -> Context:
    """Convert a context tag to a Context.

    Args:
        value: Context member or its string tag (case-insensitive)

    Returns:
        Matching Context

    Raises:
        ValueError: If the tag is not a known context
    """
    if isinstance(value, Context):
        return value
    try:
        return Context(value.strip().lower())
    except ValueError:
        known = ", ".join(c.value for c in Context)
        raise ValueError(f"Unknown context '{value}' (known: {known})") from None


def context_label(context: "Context | str | None") -> str:
    """Get the display label for a context, or the generic label."""
    if context is None:
        return GENERIC_LABEL
    try:
        return CONTEXT_LABELS[parse_context(context)]
    except ValueError:
        return GENERIC_LABEL


def roles_for(context: Context) -> tuple[Role, ...]:
    """Get the roles available in a context."""
    return CONTEXT_ROLES.get(context, ())


def default_role(context: Context) -> Role | None:
    """Get the default role for a context, if it has any."""
    roles = roles_for(context)
    return roles[0] if roles else None


def resolve_role(context: Context, role: str | None) -> Role | None:
    """Resolve a role id within a context.

    A missing role resolves to the context's default role.

    Raises:
        ValueError: If the role id is not offered in the context
    """
    if role is None:
        return default_role(context)
    for candidate in roles_for(context):
        if candidate.id == role:
            return candidate
    raise ValueError(f"Role '{role}' is not available in context '{context.value}'")


def preset_sentences(context: Context | None) -> tuple[str, ...]:
    """Get the preset sentences for a context, falling back to common phrases."""
    if context is None:
        return COMMON_PHRASES
    return PRESET_SENTENCES.get(context, COMMON_PHRASES)


__all__ = [
    "COMMON_PHRASES",
    "CONTEXT_LABELS",
    "CONTEXT_ROLES",
    "Context",
    "GENERIC_LABEL",
    "PRESET_SENTENCES",
    "QUICK_PHRASES",
    "Role",
    "context_label",
    "default_role",
    "parse_context",
    "preset_sentences",
    "resolve_role",
    "roles_for",
]
