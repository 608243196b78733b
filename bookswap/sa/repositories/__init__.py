# bookswap/sa/repositories/__init__.py
from .listing import ListingRepository
from .exchange_request import ExchangeRequestRepository
from .conversation import ConversationRepository, MessageRepository

__all__ = ['ListingRepository', 'ExchangeRequestRepository', 'ConversationRepository', 'MessageRepository']
