# bookswap/sa/__init__.py
from .database import Database, atomic
from .models import (
    Base, Listing, ExchangeRequest, Conversation, Message,
    SharingMode, ListingStatus, RequestStatus, ConversationStatus, MessageKind
)

__all__ = [
    'Database',
    'atomic',
    'Base',
    'Listing',
    'ExchangeRequest',
    'Conversation',
    'Message',
    'SharingMode',
    'ListingStatus',
    'RequestStatus',
    'ConversationStatus',
    'MessageKind'
]
