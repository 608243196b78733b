# bookswap/transitions.py
"""Listing status transitions driven by the exchange request lifecycle.

The table is keyed by (sharing mode, event) and maps every allowed source
status to its target. A swap request moves its offered listing through the
same rows as the primary listing, so both sides stay in step.
"""
from enum import Enum
from typing import Dict, Tuple

from bookswap.errors import InvalidState
from bookswap.sa.models.enums import SharingMode, ListingStatus


class ListingEvent(str, Enum):
    REQUESTED = "requested"    # a request was created
    ACCEPTED = "accepted"
    RELEASED = "released"      # the pending request was rejected or cancelled
    COMPLETED = "completed"
    RETURNED = "returned"      # a lent book came back


_S = ListingStatus

_COMMON: Dict[ListingEvent, Dict[ListingStatus, ListingStatus]] = {
    ListingEvent.REQUESTED: {_S.AVAILABLE: _S.UNAVAILABLE},
    ListingEvent.RELEASED: {_S.UNAVAILABLE: _S.AVAILABLE},
}

TRANSITIONS: Dict[Tuple[SharingMode, ListingEvent], Dict[ListingStatus, ListingStatus]] = {
    **{(mode, event): edges for mode in SharingMode for event, edges in _COMMON.items()},

    (SharingMode.GIVE_AWAY, ListingEvent.ACCEPTED): {_S.UNAVAILABLE: _S.EXCHANGE_IN_PROGRESS},
    (SharingMode.GIVE_AWAY, ListingEvent.COMPLETED): {_S.EXCHANGE_IN_PROGRESS: _S.GIVEN_AWAY},

    (SharingMode.LEND, ListingEvent.ACCEPTED): {_S.UNAVAILABLE: _S.CURRENTLY_LENT_OUT},
    # Completing a loan is the same as getting the book back
    (SharingMode.LEND, ListingEvent.COMPLETED): {_S.CURRENTLY_LENT_OUT: _S.AVAILABLE},
    (SharingMode.LEND, ListingEvent.RETURNED): {_S.CURRENTLY_LENT_OUT: _S.AVAILABLE},

    (SharingMode.SWAP, ListingEvent.ACCEPTED): {_S.UNAVAILABLE: _S.EXCHANGE_IN_PROGRESS},
    (SharingMode.SWAP, ListingEvent.COMPLETED): {_S.EXCHANGE_IN_PROGRESS: _S.SWAPPED},
}


def next_status(mode: SharingMode, event: ListingEvent, current: ListingStatus) -> ListingStatus:
    """Return the status a listing moves to when ``event`` happens.

    Args:
        mode: The listing's sharing mode
        event: The lifecycle event
        current: The listing's current status

    Returns:
        The target status

    Raises:
        InvalidState: If the event is not defined for the mode or not legal from ``current``
    """
    edges = TRANSITIONS.get((mode, event))
    if edges is None:
        raise InvalidState(f"'{event.value}' does not apply to {mode.value} listings")
    try:
        return edges[current]
    except KeyError:
        raise InvalidState(
            f"Listing cannot go from '{current.value}' on '{event.value}' ({mode.value})"
        ) from None


def can_apply(mode: SharingMode, event: ListingEvent, current: ListingStatus) -> bool:
    return current in TRANSITIONS.get((mode, event), {})
