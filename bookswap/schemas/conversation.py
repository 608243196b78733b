# bookswap/schemas/conversation.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

from bookswap.sa.models import ConversationStatus, MessageKind

class Message(BaseModel):
    id: int
    conversation_id: int
    sender_id: Optional[int] = None
    content: str
    kind: MessageKind
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class Conversation(BaseModel):
    id: int
    listing_id: int
    request_id: int
    participant_a: int
    participant_b: int
    status: ConversationStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ConversationSummary(Conversation):
    """A conversation as shown in a user's inbox"""
    latest_message: Optional[Message] = None
    unread_count: int = 0

class ConversationLog(Conversation):
    messages: List[Message] = []
