# bookswap/services/conversation_store.py
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from bookswap.errors import NotFound, Forbidden, InvalidState, ValidationError, Conflict
from bookswap.sa.database import atomic
from bookswap.sa.models import (
    Conversation, ConversationStatus, Message, MessageKind, RequestStatus, SharingMode
)
from bookswap.sa.repositories import (
    ConversationRepository, MessageRepository, ExchangeRequestRepository
)

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGES = {
    SharingMode.GIVE_AWAY: "Give away request accepted! You can now arrange the pickup details.",
    SharingMode.LEND: "Lending request accepted! You can now arrange the pickup and return details.",
    SharingMode.SWAP: "Swap request accepted! You can now arrange the book exchange details.",
}

CLOSING_MESSAGES = {
    ConversationStatus.COMPLETED: (MessageKind.EXCHANGE_COMPLETED, "Exchange completed successfully!"),
    ConversationStatus.CANCELLED: (MessageKind.EXCHANGE_CANCELLED, "Exchange was cancelled."),
}

RECENT_MESSAGE_LIMIT = 50


class ConversationStore:
    """Owns conversations and their append-only message logs.

    A conversation is opened for an accepted exchange request, at most once
    per request, and closed when the exchange completes or is called off.
    """

    def __init__(self, session: Session):
        self.session = session
        self.conversations = ConversationRepository(session)
        self.messages = MessageRepository(session)
        self.requests = ExchangeRequestRepository(session)

    def create_for_request(self, request_id: int) -> Conversation:
        """Open the conversation for an ACCEPTED request.

        The requester and the owner become the two participants and the log
        starts with one system message worded for the request type.

        Args:
            request_id: The accepted exchange request

        Returns:
            The ACTIVE Conversation

        Raises:
            NotFound: If the request does not exist
            InvalidState: If the request is not ACCEPTED
            Conflict: If the request already has a conversation
        """
        with atomic(self.session):
            request = self.requests.get_by_id(request_id)
            if request is None:
                raise NotFound(f"Request not found with id: {request_id}")
            if request.status != RequestStatus.ACCEPTED:
                raise InvalidState("Cannot create a conversation for a request that is not accepted")
            if self.conversations.exists_for_request(request_id):
                raise Conflict(f"A conversation already exists for request {request_id}")

            conversation = Conversation(
                listing_id=request.listing_id,
                request_id=request.id,
                participant_a=request.requester_id,
                participant_b=request.owner_id,
                status=ConversationStatus.ACTIVE
            )
            conversation.messages.append(Message(
                sender_id=None,
                content=ACCEPTED_MESSAGES[request.request_type],
                kind=MessageKind.SYSTEM
            ))
            self.conversations.add(conversation)
        logger.info(f"Conversation {conversation.id} opened for request {request_id}")
        return conversation

    def post_message(self, conversation_id: int, sender_id: int, content: str) -> Message:
        """Append a text message written by one of the participants.

        Raises:
            NotFound: If the conversation does not exist
            InvalidState: If the conversation is closed
            Forbidden: If the sender is not a participant
            ValidationError: If the content is blank
        """
        with atomic(self.session):
            conversation = self._lock(conversation_id)
            if not conversation.is_active:
                raise InvalidState("Conversation is not active")
            if not conversation.involves(sender_id):
                raise Forbidden("You are not part of this conversation")
            if content is None or not content.strip():
                raise ValidationError("Message content is required")
            message = self.messages.add(Message(
                conversation_id=conversation.id,
                sender_id=sender_id,
                content=content.strip(),
                kind=MessageKind.TEXT
            ))
        return message

    def close(self, conversation_id: int, caller_id: int, outcome: ConversationStatus) -> Conversation:
        """Close an ACTIVE conversation as COMPLETED or CANCELLED.

        Appends the matching EXCHANGE_COMPLETED or EXCHANGE_CANCELLED entry.

        Args:
            conversation_id: The conversation to close
            caller_id: A participant
            outcome: ConversationStatus.COMPLETED or ConversationStatus.CANCELLED

        Returns:
            The closed Conversation
        """
        try:
            outcome = ConversationStatus(outcome)
        except ValueError:
            raise ValidationError(f"Unknown conversation outcome: {outcome}") from None
        if outcome not in CLOSING_MESSAGES:
            raise ValidationError(f"A conversation cannot be closed as '{outcome.value}'")

        with atomic(self.session):
            conversation = self._lock(conversation_id)
            if not conversation.is_active:
                raise InvalidState("Conversation is not active")
            if not conversation.involves(caller_id):
                raise Forbidden("You are not part of this conversation")
            kind, text = CLOSING_MESSAGES[outcome]
            conversation.status = outcome
            self.messages.add(Message(conversation_id=conversation.id, sender_id=None, content=text, kind=kind))
        logger.info(f"Conversation {conversation_id} closed as {outcome.value} by user {caller_id}")
        return conversation

    # Queries

    def get(self, conversation_id: int) -> Conversation:
        conversation = self.conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFound(f"Conversation not found with id: {conversation_id}")
        return conversation

    def get_by_request(self, request_id: int) -> Optional[Conversation]:
        return self.conversations.get_by_request_id(request_id)

    def list_for_user(self, user_id: int, status: Optional[ConversationStatus] = None) -> List[Conversation]:
        return self.conversations.get_for_user(user_id, status)

    def messages_for(self, conversation_id: int) -> List[Message]:
        """Full log, oldest first"""
        self.get(conversation_id)
        return self.messages.get_by_conversation(conversation_id)

    def recent_messages(self, conversation_id: int, limit: int = RECENT_MESSAGE_LIMIT) -> List[Message]:
        """Most recent ``limit`` messages, newest first"""
        self.get(conversation_id)
        return self.messages.get_recent(conversation_id, limit)

    def latest_message(self, conversation_id: int) -> Optional[Message]:
        return self.messages.get_latest(conversation_id)

    def unread_count(self, conversation_id: int, user_id: int) -> int:
        """Text messages the user did not write.

        No read cursor is stored, so this is recomputed on every call and
        approximates what the user has not seen yet.
        """
        return self.messages.count_unread(conversation_id, user_id)

    def total_unread_count(self, user_id: int) -> int:
        return self.messages.count_unread_for_user(user_id)

    def _lock(self, conversation_id: int) -> Conversation:
        conversation = self.conversations.lock_by_id(conversation_id)
        if conversation is None:
            raise NotFound(f"Conversation not found with id: {conversation_id}")
        return conversation
