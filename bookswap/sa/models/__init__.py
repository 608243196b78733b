# bookswap/sa/models/__init__.py
from .base import Base, TimestampMixin
from .enums import (
    SharingMode, ListingStatus, RequestStatus, ConversationStatus, MessageKind,
    ACTIVE_REQUEST_STATUSES
)
from .listing import Listing
from .exchange_request import ExchangeRequest
from .conversation import Conversation, Message

__all__ = [
    'Base',
    'TimestampMixin',
    'SharingMode',
    'ListingStatus',
    'RequestStatus',
    'ConversationStatus',
    'MessageKind',
    'ACTIVE_REQUEST_STATUSES',
    'Listing',
    'ExchangeRequest',
    'Conversation',
    'Message'
]
