"""Suggestion gateway module for AACommu.

Provides the client for the remote transcription/suggestion service and an
in-process mock of it.
"""

from .client import SuggestionGateway
from .errors import (
    GatewayError,
    GatewayTimeoutError,
    MalformedResponseError,
    TransportError,
)
from .mock import MockSuggestionService
from .service import (
    EndResponse,
    SelectResponse,
    StartResponse,
    SuggestionService,
    VoiceResponse,
)

__all__ = [
    "EndResponse",
    "GatewayError",
    "GatewayTimeoutError",
    "MalformedResponseError",
    "MockSuggestionService",
    "SelectResponse",
    "StartResponse",
    "SuggestionGateway",
    "SuggestionService",
    "TransportError",
    "VoiceResponse",
]
