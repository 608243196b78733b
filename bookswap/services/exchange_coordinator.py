# bookswap/services/exchange_coordinator.py
import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from bookswap.errors import (
    NotFound, Forbidden, InvalidState, ValidationError, Conflict, InvalidOperation
)
from bookswap.sa.database import atomic
from bookswap.sa.models import Listing, ExchangeRequest, SharingMode, RequestStatus
from bookswap.sa.repositories import ExchangeRequestRepository
from bookswap.schemas.exchange_request import RequestDraft, GiveAwayDraft, LendDraft, SwapDraft
from bookswap.services.listing_store import ListingStore
from bookswap.transitions import ListingEvent, next_status, can_apply

logger = logging.getLogger(__name__)

_MODE_LABELS = {
    SharingMode.GIVE_AWAY: "give away",
    SharingMode.LEND: "lending",
    SharingMode.SWAP: "swapping",
}


class ExchangeCoordinator:
    """Drives the exchange request lifecycle and the listing statuses that follow it.

    Every public mutation runs in one transaction. The requested listing and,
    for swaps, the offered listing are locked in ascending ID order before
    anything is checked, and both carry a version counter, so of two callers
    racing for the same AVAILABLE listing exactly one gets through.
    """

    def __init__(self, session: Session, listings: Optional[ListingStore] = None):
        self.session = session
        self.listings = listings or ListingStore(session)
        self.requests = ExchangeRequestRepository(session)

    # Request creation

    def create_give_away_request(self, listing_id: int, requester_id: int,
                                 message: Optional[str] = None) -> ExchangeRequest:
        """Ask for a book its owner is giving away.

        Args:
            listing_id: The requested listing
            requester_id: The caller
            message: Optional note to the owner

        Returns:
            The PENDING ExchangeRequest
        """
        with atomic(self.session):
            listing = self._lock_listings(listing_id)[listing_id]
            self._check_requestable(listing, requester_id, SharingMode.GIVE_AWAY)
            return self._open(ExchangeRequest(
                listing_id=listing.id,
                requester_id=requester_id,
                owner_id=listing.owner_id,
                request_type=SharingMode.GIVE_AWAY,
                message=message,
            ), [listing])

    def create_lend_request(self, listing_id: int, requester_id: int,
                            requested_duration_days: int,
                            message: Optional[str] = None) -> ExchangeRequest:
        """Ask to borrow a book for a number of days.

        Args:
            listing_id: The requested listing
            requester_id: The caller
            requested_duration_days: Loan length, between 1 and the listing's maximum
            message: Optional note to the owner

        Returns:
            The PENDING ExchangeRequest

        Raises:
            ValidationError: If the duration is missing, not positive or too long
        """
        with atomic(self.session):
            listing = self._lock_listings(listing_id)[listing_id]
            self._check_requestable(listing, requester_id, SharingMode.LEND)
            if (not isinstance(requested_duration_days, int) or isinstance(requested_duration_days, bool)
                    or requested_duration_days <= 0):
                raise ValidationError("Requested duration must be a positive number of days")
            if listing.max_lending_days is not None and requested_duration_days > listing.max_lending_days:
                raise ValidationError(
                    f"Requested duration cannot exceed the book's maximum lending period "
                    f"of {listing.max_lending_days} days"
                )
            return self._open(ExchangeRequest(
                listing_id=listing.id,
                requester_id=requester_id,
                owner_id=listing.owner_id,
                request_type=SharingMode.LEND,
                requested_duration_days=requested_duration_days,
                message=message,
            ), [listing])

    def create_swap_request(self, listing_id: int, requester_id: int, offered_listing_id: int,
                            message: Optional[str] = None) -> ExchangeRequest:
        """Offer one of the caller's own swap listings in exchange for another.

        Args:
            listing_id: The requested listing
            requester_id: The caller
            offered_listing_id: A SWAP listing owned by the caller
            message: Optional note to the owner

        Returns:
            The PENDING ExchangeRequest

        Raises:
            NotFound: If the requested listing does not exist
            InvalidOperation: If the offered listing is missing, is the requested one or is not the caller's
            InvalidState: If either listing is not an available swap listing
        """
        if listing_id == offered_listing_id:
            raise InvalidOperation("Cannot swap a book for itself")

        with atomic(self.session):
            locked = self.listings.repository.lock_by_ids([listing_id, offered_listing_id])
            if listing_id not in locked:
                raise NotFound(f"Listing not found with id: {listing_id}")
            listing = locked[listing_id]
            self._check_requestable(listing, requester_id, SharingMode.SWAP)
            offered = locked.get(offered_listing_id)
            if offered is None:
                raise InvalidOperation("The offered book does not exist")
            if offered.owner_id != requester_id:
                raise InvalidOperation("You can only offer your own books for swap")
            if offered.sharing_mode != SharingMode.SWAP:
                raise InvalidOperation("The offered book is not listed for swapping")
            if not can_apply(SharingMode.SWAP, ListingEvent.REQUESTED, offered.status):
                raise InvalidOperation("The offered book is not available for swapping")
            return self._open(ExchangeRequest(
                listing_id=listing.id,
                requester_id=requester_id,
                owner_id=listing.owner_id,
                request_type=SharingMode.SWAP,
                offered_listing_id=offered.id,
                message=message,
            ), [listing, offered])

    def submit(self, requester_id: int, draft: RequestDraft) -> ExchangeRequest:
        """Create a request from a validated draft of any of the three kinds"""
        if isinstance(draft, GiveAwayDraft):
            return self.create_give_away_request(draft.listing_id, requester_id, draft.message)
        if isinstance(draft, LendDraft):
            return self.create_lend_request(
                draft.listing_id, requester_id, draft.requested_duration_days, draft.message
            )
        if isinstance(draft, SwapDraft):
            return self.create_swap_request(
                draft.listing_id, requester_id, draft.offered_listing_id, draft.message
            )
        raise ValidationError(f"Unsupported request draft: {type(draft).__name__}")

    # Lifecycle

    def accept_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Accept a PENDING request. Only the listing owner may accept.

        Opening the conversation is left to the orchestration facade, which
        runs it in the same transaction.
        """
        with atomic(self.session):
            request = self._lock_request(request_id)
            self._require_owner(request, caller_id, "accept")
            self._require_status(request, RequestStatus.PENDING)
            self._advance(request, ListingEvent.ACCEPTED)
            return self._set_status(request, RequestStatus.ACCEPTED)

    def reject_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Turn down a PENDING request and put the listing(s) back on offer"""
        with atomic(self.session):
            request = self._lock_request(request_id)
            self._require_owner(request, caller_id, "reject")
            self._require_status(request, RequestStatus.PENDING)
            self._advance(request, ListingEvent.RELEASED)
            return self._set_status(request, RequestStatus.REJECTED)

    def cancel_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Withdraw a PENDING request. Only the requester may cancel."""
        with atomic(self.session):
            request = self._lock_request(request_id)
            if request.requester_id != caller_id:
                raise Forbidden("You can only cancel your own requests")
            self._require_status(request, RequestStatus.PENDING)
            self._advance(request, ListingEvent.RELEASED)
            return self._set_status(request, RequestStatus.CANCELLED)

    def complete_request(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Mark an ACCEPTED exchange as done.

        Give-away listings end GIVEN_AWAY and both swap listings end SWAPPED.
        A loan completed here counts as returned, so its listing goes back to
        AVAILABLE exactly as with ``return_lent_book``.
        """
        with atomic(self.session):
            request = self._lock_request(request_id)
            self._require_owner(request, caller_id, "complete")
            self._require_status(request, RequestStatus.ACCEPTED)
            self._advance(request, ListingEvent.COMPLETED)
            return self._set_status(request, RequestStatus.COMPLETED)

    def return_lent_book(self, request_id: int, caller_id: int) -> ExchangeRequest:
        """Record that a lent book came back to its owner.

        Raises:
            InvalidState: If the request is not an ACCEPTED lending request
            Forbidden: If the caller is not the owner
        """
        with atomic(self.session):
            request = self._lock_request(request_id)
            if request.request_type != SharingMode.LEND:
                raise InvalidState("Request is not a lending request")
            if request.owner_id != caller_id:
                raise Forbidden("Only the book owner can mark the book as returned")
            self._require_status(request, RequestStatus.ACCEPTED)
            self._advance(request, ListingEvent.RETURNED)
            return self._set_status(request, RequestStatus.COMPLETED)

    # Queries

    def get(self, request_id: int) -> ExchangeRequest:
        request = self.requests.get_by_id(request_id)
        if request is None:
            raise NotFound(f"Request not found with id: {request_id}")
        return request

    def list_by_requester(self, requester_id: int) -> List[ExchangeRequest]:
        return self.requests.get_by_requester(requester_id)

    def list_by_owner(self, owner_id: int) -> List[ExchangeRequest]:
        return self.requests.get_by_owner(owner_id)

    def list_active_by_requester(self, requester_id: int) -> List[ExchangeRequest]:
        return self.requests.get_active_by_requester(requester_id)

    def list_active_by_owner(self, owner_id: int) -> List[ExchangeRequest]:
        return self.requests.get_active_by_owner(owner_id)

    def list_by_listing(self, listing_id: int) -> List[ExchangeRequest]:
        return self.requests.get_by_listing(listing_id)

    def list_pending_by_listing(self, listing_id: int) -> List[ExchangeRequest]:
        return self.requests.get_by_listing(listing_id, status=RequestStatus.PENDING)

    def list_by_status(self, status: RequestStatus) -> List[ExchangeRequest]:
        return self.requests.get_by_status(status)

    def count_pending_for_owner(self, owner_id: int) -> int:
        """Number of received requests waiting for the owner's answer"""
        return self.requests.count_by_owner(owner_id, [RequestStatus.PENDING])

    def count_updated_for_requester(self, requester_id: int) -> int:
        """Number of sent requests the owner has acted on"""
        return self.requests.count_by_requester(
            requester_id,
            [RequestStatus.ACCEPTED, RequestStatus.REJECTED, RequestStatus.COMPLETED]
        )

    # Helpers

    def _lock_listings(self, *listing_ids: int) -> Dict[int, Listing]:
        locked = self.listings.repository.lock_by_ids(list(listing_ids))
        for listing_id in listing_ids:
            if listing_id not in locked:
                raise NotFound(f"Listing not found with id: {listing_id}")
        return locked

    def _lock_request(self, request_id: int) -> ExchangeRequest:
        request = self.requests.lock_by_id(request_id)
        if request is None:
            raise NotFound(f"Request not found with id: {request_id}")
        return request

    def _check_requestable(self, listing: Listing, requester_id: int, request_type: SharingMode) -> None:
        if listing.owner_id == requester_id:
            raise InvalidOperation("You cannot request your own book")
        if self.requests.has_pending(listing.id, requester_id):
            raise Conflict("You already have a pending request for this book")
        if (listing.sharing_mode != request_type
                or not can_apply(request_type, ListingEvent.REQUESTED, listing.status)):
            raise InvalidState(f"Book is not available for {_MODE_LABELS[request_type]}")

    def _open(self, request: ExchangeRequest, listings: List[Listing]) -> ExchangeRequest:
        for listing in listings:
            self.listings.set_status(
                listing.id, next_status(listing.sharing_mode, ListingEvent.REQUESTED, listing.status)
            )
        request.status = RequestStatus.PENDING
        self.requests.add(request)
        logger.info(
            f"Request {request.id} ({request.request_type.value}) opened by user {request.requester_id} "
            f"on listing {request.listing_id}"
        )
        return request

    def _advance(self, request: ExchangeRequest, event: ListingEvent) -> None:
        """Move every listing of the request through ``event``, validating all before writing any"""
        locked = self._lock_listings(*request.listing_ids)
        targets = [
            (listing, next_status(listing.sharing_mode, event, listing.status))
            for listing in (locked[listing_id] for listing_id in request.listing_ids)
        ]
        for listing, target in targets:
            self.listings.set_status(listing.id, target)

    def _set_status(self, request: ExchangeRequest, status: RequestStatus) -> ExchangeRequest:
        logger.info(f"Request {request.id}: {request.status.value} -> {status.value}")
        request.status = status
        self.session.flush()
        return request

    def _require_owner(self, request: ExchangeRequest, caller_id: int, action: str) -> None:
        if request.owner_id != caller_id:
            raise Forbidden(f"You can only {action} requests for your own books")

    def _require_status(self, request: ExchangeRequest, status: RequestStatus) -> None:
        if request.status != status:
            raise InvalidState(f"Request is not {status.value} (currently {request.status.value})")
