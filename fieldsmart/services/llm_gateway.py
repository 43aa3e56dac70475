"""Client for the external LLM chat gateway."""

import logging
from typing import Any

import httpx

from fieldsmart.errors import UpstreamServiceError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class LLMGatewayClient:
    """Thin async wrapper around the gateway's POST /chat."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def chat(
        self,
        *,
        tenant_id: str,
        user_id: str,
        conversation_id: str,
        message: str,
        history: list[dict[str, Any]],
    ) -> str:
        """Send one message and return the assistant's reply text."""
        payload = {
            "tenantId": tenant_id,
            "userId": user_id,
            "conversationId": conversation_id,
            "message": message,
            "history": history,
        }
        try:
            response = await self._client.post("/chat", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("LLM gateway timed out for conversation %s", conversation_id)
            raise UpstreamTimeoutError("Chat service timed out") from None
        except httpx.HTTPStatusError as exc:
            logger.warning("LLM gateway returned %s for conversation %s", exc.response.status_code, conversation_id)
            raise UpstreamServiceError("Chat service returned an error") from None
        except httpx.RequestError as exc:
            logger.warning("LLM gateway unreachable: %s", exc)
            raise UpstreamServiceError("Chat service is unavailable") from None

        try:
            body = response.json()
        except ValueError:
            raise UpstreamServiceError("Chat service returned an invalid response") from None
        reply = body.get("reply") if isinstance(body, dict) else None
        if not isinstance(reply, str):
            raise UpstreamServiceError("Chat service returned an invalid response")
        return reply

    async def aclose(self) -> None:
        await self._client.aclose()
