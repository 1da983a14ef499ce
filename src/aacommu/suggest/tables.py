"""Suggestion tables for the local fallback engine.

Two-level ordered mapping: context tag -> last token -> next candidates.
The sentinel key ``default`` appears at both levels: as a context tag it
names the global table, and inside each context it is used when the last
token has no entry of its own.
"""

DEFAULT_KEY = "default"

NEXT_TOKENS: dict[str, dict[str, tuple[str, ...]]] = {
    "restaurant": {
        "저는": ("비빔밥을", "불고기를", "주문할게요", "주세요"),
        "불고기": ("주세요", "랑", "정식을", "세트를"),
        "비빔밥": ("주세요", "이", "을", "랑"),
        "메뉴": ("추천해", "좀", "보여", "주세요"),
        DEFAULT_KEY: ("주세요", "랑", "을", "이", "감사합니다"),
    },
    "hospital": {
        "머리가": ("아파요", "아프고", "멍해요", "어지러워요"),
        "배가": ("아파요", "아프고", "불편해요", "메스꺼워요"),
        "다리가": ("아파요", "붓고", "저려요", "불편해요"),
        DEFAULT_KEY: ("아파요", "불편해요", "때문에", "왔어요", "하고"),
    },
    "classroom": {
        "이해가": ("안", "잘", "되지", "됐어요"),
        "질문이": ("있습니다", "있어요", "좀", "하나"),
        "예제를": ("더", "보여주세요", "설명해주세요", "이해했어요"),
        "설명을": ("부탁드립니다", "다시", "해주세요", "이해했어요"),
        DEFAULT_KEY: ("해주세요", "주세요", "부탁드립니다", "있어요", "감사합니다"),
    },
    DEFAULT_KEY: {
        "도움이": ("필요해요", "좀", "주세요", "감사합니다"),
        "안녕하세요": ("저는", "도움이", "필요해요", "감사합니다"),
        DEFAULT_KEY: ("네", "아니오", "감사합니다", "부탁드립니다", "죄송합니다"),
    },
}

# Canned partner prompts used by the in-process mock service:
# context tag -> (transcript, first candidates).
OPENERS: dict[str, tuple[str, tuple[str, ...]]] = {
    "restaurant": ("뭘 주문하시겠어요?", ("저는", "불고기", "비빔밥", "메뉴", "주문할게요")),
    "hospital": ("어디가 불편하세요?", ("머리가", "배가", "다리가", "아파요", "불편해요")),
    "classroom": ("질문 있으신가요?", ("이해가", "질문이", "예제를", "설명을", "있습니다")),
    DEFAULT_KEY: ("무엇을 도와드릴까요?", ("도움이", "안녕하세요", "감사합니다", "필요해요", "죄송합니다")),
}


__all__ = ["DEFAULT_KEY", "NEXT_TOKENS", "OPENERS"]
