"""HTTP client for the transcription/suggestion service.

Wraps the four service operations (start, voice, select, end) as typed
request/response contracts. The client holds no conversation state.
"""

import json
import logging
import time
from typing import Any

import httpx

from ..config import GatewayConfig
from .errors import GatewayTimeoutError, MalformedResponseError, TransportError
from .service import EndResponse, SelectResponse, StartResponse, VoiceResponse

logger = logging.getLogger(__name__)


def _require_str(payload: dict[str, Any], key: str, operation: str, body: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise MalformedResponseError(
            f"{operation}: expected string field '{key}'",
            operation=operation,
            body=body,
        )
    return value


def _options(payload: dict[str, Any], operation: str, body: str) -> list[str]:
    # Missing or null options mean "nothing to suggest"
    value = payload.get("options")
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedResponseError(
            f"{operation}: expected 'options' to be a list of strings",
            operation=operation,
            body=body,
        )
    return list(value)


class SuggestionGateway:
    """Async client for the suggestion service.

    Every call is an independent form POST. Failures of any
    kind are raised as TransportError; retry policy belongs to the caller.

    Example:
        async with SuggestionGateway(GatewayConfig(base_url="http://host:8000")) as gw:
            await gw.start("restaurant", "customer")
            reply = await gw.select("불고기")
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: Service configuration.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config or GatewayConfig()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """Get the service base URL."""
        return self._config.base_url

    async def start(self, context: str, role: str | None = None) -> StartResponse:
        """Initialize server-side composition state.

        Args:
            context: Context tag (e.g. "restaurant").
            role: Optional role tag (e.g. "customer").

        Returns:
            StartResponse with the server message.

        Raises:
            TransportError: On network failure or non-success status.
        """
        data = {"context": context}
        if role:
            data["role"] = role
        payload, body = await self._post("start", data=data)
        return StartResponse(message=_require_str(payload, "message", "start", body))

    async def voice(self, audio: bytes) -> VoiceResponse:
        """Submit a recorded clip for transcription and first candidates.

        Args:
            audio: Complete audio clip (WAV bytes).

        Returns:
            VoiceResponse with the partner's transcript and candidates.

        Raises:
            TransportError: On network failure or non-success status.
        """
        files = {
            "file": (
                self._config.upload_filename,
                audio,
                self._config.upload_content_type,
            )
        }
        payload, body = await self._post(
            "voice",
            files=files,
            timeout=self._config.voice_timeout_seconds,
        )
        return VoiceResponse(
            transcribed_text=_require_str(payload, "transcribed_text", "voice", body),
            options=_options(payload, "voice", body),
        )

    async def select(self, choice: str) -> SelectResponse:
        """Append a token to the server-tracked sentence.

        Args:
            choice: The chosen token.

        Returns:
            SelectResponse with the authoritative sentence and next candidates.

        Raises:
            TransportError: On network failure or non-success status.
        """
        payload, body = await self._post("select", data={"choice": choice})
        return SelectResponse(
            current_sentence=_require_str(payload, "current_sentence", "select", body),
            options=_options(payload, "select", body),
        )

    async def end(self) -> EndResponse:
        """Finalize and clear the server-side sentence.

        Returns:
            EndResponse with the final sentence.

        Raises:
            TransportError: On network failure or non-success status.
        """
        payload, body = await self._post("end")
        return EndResponse(
            final_sentence=_require_str(payload, "final_sentence", "end", body)
        )

    async def _post(
        self,
        operation: str,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        timeout: float | None = None,
    ) -> tuple[dict[str, Any], str]:
        """POST to an operation endpoint and decode the JSON object body.

        Every field is sent as multipart/form-data; operations without
        fields are sent with no body.

        Returns:
            Tuple of (decoded payload, raw body text).
        """
        start_time = time.time()
        logger.debug(f"Gateway {operation}: request {data or ''}")

        # Plain fields are parts without a filename
        parts: dict[str, Any] = {name: (None, value) for name, value in (data or {}).items()}
        if files:
            parts.update(files)

        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if parts:
            kwargs["files"] = parts

        try:
            response = await self._client.post(f"/{operation}", **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Gateway {operation} timed out: {e}")
            raise GatewayTimeoutError(
                f"{operation} timed out: {e}", operation=operation
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Gateway {operation} failed: {e}")
            raise TransportError(f"{operation} failed: {e}", operation=operation) from e

        body = response.text
        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Gateway {operation}: status {response.status_code} in {latency_ms}ms")

        if not response.is_success:
            logger.warning(f"Gateway {operation} error {response.status_code}: {body[:200]}")
            raise TransportError(
                f"{operation} failed with status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
                body=body,
            )

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise MalformedResponseError(
                f"{operation}: response is not JSON",
                operation=operation,
                status_code=response.status_code,
                body=body,
            ) from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"{operation}: response is not a JSON object",
                operation=operation,
                status_code=response.status_code,
                body=body,
            )

        return payload, body

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "SuggestionGateway":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.aclose()


__all__ = ["SuggestionGateway"]
