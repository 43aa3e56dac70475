"""Chat endpoint - proxies messages to the LLM gateway."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fieldsmart.api.responses import JsonBody
from fieldsmart.auth.middleware import UserDep
from fieldsmart.models.mixins import utcnow
from fieldsmart.schemas.chat import ChatRequest, ChatResponse
from fieldsmart.services.llm_gateway import LLMGatewayClient
from fieldsmart.validation.payload import validate_payload

logger = logging.getLogger(__name__)

router = APIRouter()


def get_llm_client(request: Request) -> LLMGatewayClient:
    return request.app.state.llm


@router.post("/chat", response_model=ChatResponse)
async def chat(
    tenant: UserDep,
    body: JsonBody,
    llm: Annotated[LLMGatewayClient, Depends(get_llm_client)],
):
    """Forward a message to the LLM gateway. Requires tenant and user headers."""
    payload = validate_payload(body, ChatRequest)
    conversation_id = payload.conversation_id or str(uuid.uuid4())
    reply = await llm.chat(
        tenant_id=tenant.tenant_id,
        user_id=tenant.user_id,
        conversation_id=conversation_id,
        message=payload.message,
        history=[turn.model_dump() for turn in payload.history],
    )
    logger.info("Chat reply for conversation %s (%d chars)", conversation_id, len(reply))
    return ChatResponse(conversation_id=conversation_id, reply=reply, timestamp=utcnow())
