# bookswap/services/orchestration.py
import logging
from typing import Optional
from sqlalchemy.orm import Session

from bookswap.errors import Conflict
from bookswap.sa.database import atomic
from bookswap.sa.models import Conversation, ConversationStatus, ExchangeRequest, Message
from bookswap.schemas.exchange_request import RequestDraft
from bookswap.services.conversation_store import ConversationStore
from bookswap.services.exchange_coordinator import ExchangeCoordinator
from bookswap.services.listing_store import ListingStore

logger = logging.getLogger(__name__)


class OrchestrationFacade:
    """Entry point for the request layer.

    Ties the request lifecycle to the conversation lifecycle: accepting a
    request opens its conversation, completing it or returning a lent book
    closes that conversation. Each call is a single transaction.
    """

    def __init__(self, session: Session,
                 coordinator: Optional[ExchangeCoordinator] = None,
                 conversations: Optional[ConversationStore] = None):
        self.session = session
        self.listings = coordinator.listings if coordinator else ListingStore(session)
        self.coordinator = coordinator or ExchangeCoordinator(session, self.listings)
        self.conversations = conversations or ConversationStore(session)

    def create_give_away_request(self, listing_id: int, requester_id: int,
                                 message: Optional[str] = None) -> ExchangeRequest:
        return self.coordinator.create_give_away_request(listing_id, requester_id, message)

    def create_lend_request(self, listing_id: int, requester_id: int, requested_duration_days: int,
                            message: Optional[str] = None) -> ExchangeRequest:
        return self.coordinator.create_lend_request(listing_id, requester_id, requested_duration_days, message)

    def create_swap_request(self, listing_id: int, requester_id: int, offered_listing_id: int,
                            message: Optional[str] = None) -> ExchangeRequest:
        return self.coordinator.create_swap_request(listing_id, requester_id, offered_listing_id, message)

    def submit(self, requester_id: int, draft: RequestDraft) -> ExchangeRequest:
        return self.coordinator.submit(requester_id, draft)

    def accept_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Accept a request and open its conversation.

        A conversation that already exists for the request means the accept
        path ran twice; that is not an error.
        """
        with atomic(self.session):
            request = self.coordinator.accept_request(request_id, caller_id)
            try:
                self.conversations.create_for_request(request.id)
            except Conflict:
                logger.info(f"Conversation already exists for request {request.id}, continuing")
        return request

    def reject_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        return self.coordinator.reject_request(request_id, caller_id)

    def cancel_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        return self.coordinator.cancel_request(request_id, caller_id)

    def complete_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        with atomic(self.session):
            request = self.coordinator.complete_request(request_id, caller_id)
            self._close_conversation(request, caller_id)
        return request

    def return_lent_book(self, request_id: int, caller_id: int) -> ExchangeRequest:
        with atomic(self.session):
            request = self.coordinator.return_lent_book(request_id, caller_id)
            self._close_conversation(request, caller_id)
        return request

    def send_message(self, conversation_id: int, sender_id: int, content: str) -> Message:
        return self.conversations.post_message(conversation_id, sender_id, content)

    def cancel_conversation(self, conversation_id: int, caller_id: int) -> Conversation:
        """Call off the hand-off chat without touching the request"""
        return self.conversations.close(conversation_id, caller_id, ConversationStatus.CANCELLED)

    def _close_conversation(self, request: ExchangeRequest, caller_id: int) -> None:
        conversation = self.conversations.get_by_request(request.id)
        if conversation is None:
            logger.info(f"No conversation to close for request {request.id}")
            return
        if not conversation.is_active:
            logger.info(f"Conversation {conversation.id} already {conversation.status.value}, leaving it")
            return
        self.conversations.close(conversation.id, caller_id, ConversationStatus.COMPLETED)
