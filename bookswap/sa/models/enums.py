# bookswap/sa/models/enums.py
from enum import Enum


class SharingMode(str, Enum):
    GIVE_AWAY = "give_away"
    LEND = "lend"
    SWAP = "swap"


class ListingStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"                    # a request is pending
    EXCHANGE_IN_PROGRESS = "exchange_in_progress"  # give-away or swap accepted
    CURRENTLY_LENT_OUT = "currently_lent_out"
    GIVEN_AWAY = "given_away"
    SWAPPED = "swapped"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MessageKind(str, Enum):
    TEXT = "text"
    SYSTEM = "system"
    EXCHANGE_COMPLETED = "exchange_completed"
    EXCHANGE_CANCELLED = "exchange_cancelled"


ACTIVE_REQUEST_STATUSES = frozenset({
    RequestStatus.PENDING,
    RequestStatus.ACCEPTED,
})
