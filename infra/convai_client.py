"""HTTP client for the ElevenLabs Conversational AI ("Convai") API.

Only the two read endpoints the gateway needs are wrapped. Responses are
returned as decoded JSON without reshaping; callers decide what to expose.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

logger = structlog.get_logger("convai.client")


class ConvaiError(Exception):
    """Upstream call failed. ``status_code`` is None for timeouts and transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConvaiClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "xi-api-key": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def list_conversations(self) -> Dict[str, Any]:
        """``GET /conversations``: first page only, ``{conversations, has_more, next_cursor}``."""
        return await self._get("/conversations", operation="list")

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        """``GET /conversations/{id}``: one conversation including its transcript."""
        return await self._get(
            f"/conversations/{conversation_id}",
            operation="get",
            conversation_id=conversation_id,
        )

    async def _get(self, path: str, *, operation: str, **log_context: Any) -> Dict[str, Any]:
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            logger.error("Convai request timed out", operation=operation, **log_context)
            raise ConvaiError(f"Upstream request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(
                "Convai request failed", operation=operation, error=str(e), **log_context
            )
            raise ConvaiError(f"Upstream request failed: {e}") from e

        if response.is_error:
            body = response.text
            logger.error(
                "Convai error response",
                operation=operation,
                status=response.status_code,
                body=body,
                **log_context,
            )
            raise ConvaiError(body or response.reason_phrase, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ConvaiError("Upstream returned invalid JSON", response.status_code) from e
        if not isinstance(data, dict):
            raise ConvaiError("Upstream returned an unexpected payload", response.status_code)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()
