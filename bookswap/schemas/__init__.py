# bookswap/schemas/__init__.py
from .listing import Listing, ListingCreate, ListingStats
from .exchange_request import (
    ExchangeRequest, RequestCounts, RequestDraft, GiveAwayDraft, LendDraft, SwapDraft
)
from .conversation import Conversation, ConversationSummary, ConversationLog, Message

__all__ = [
    'Listing',
    'ListingCreate',
    'ListingStats',
    'ExchangeRequest',
    'RequestCounts',
    'RequestDraft',
    'GiveAwayDraft',
    'LendDraft',
    'SwapDraft',
    'Conversation',
    'ConversationSummary',
    'ConversationLog',
    'Message'
]
