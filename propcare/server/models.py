"""Pydantic request/response models for the PropCare API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import IncomingMessage


class MessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    type: str = "text"
    content: Optional[str] = None
    media_url: Optional[str] = Field(default=None, alias="mediaUrl")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    metadata: Optional[dict] = None

    def to_incoming(self) -> IncomingMessage:
        return IncomingMessage(
            from_=self.from_,
            type=self.type,
            content=self.content,
            media_url=self.media_url,
            conversation_id=self.conversation_id,
            metadata=self.metadata or {},
        )


class MessageResponse(BaseModel):
    message: str
    workerUsed: str
    issueId: Optional[str] = None
    stateUpdates: Optional[Dict[str, Any]] = None
    toolsExecuted: List[str] = []
