"""Chat proxy schemas."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from fieldsmart.schemas.common import ResponseModel
from fieldsmart.validation.payload import Payload

MAX_MESSAGE_LENGTH = 10000


class ChatTurn(Payload):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(Payload):
    """POST /v1/chat request."""

    omit_blank = frozenset({"conversation_id"})

    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_MESSAGE_LENGTH)]
    conversation_id: str | None = None
    history: list[ChatTurn] = Field(default_factory=list)


class ChatResponse(ResponseModel):
    conversation_id: str
    reply: str
    timestamp: datetime
