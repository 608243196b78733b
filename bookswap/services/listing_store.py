# bookswap/services/listing_store.py
import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from bookswap.errors import NotFound, Forbidden, InvalidState, ValidationError
from bookswap.sa.database import atomic
from bookswap.sa.models import Listing, ListingStatus, SharingMode
from bookswap.sa.repositories import ListingRepository

logger = logging.getLogger(__name__)

VALID_CONDITIONS = ("New", "Like New", "Good", "Fair", "Poor")

# (column, max length, required)
_TEXT_FIELDS = {
    'title': (200, True),
    'author': (100, True),
    'genre': (50, False),
    'isbn': (20, False),
    'condition': (20, True),
    'description': (1000, False),
    'pickup_location': (200, False),
}


def _clean(field: str, value: Optional[str]) -> Optional[str]:
    """Trim a text field, turning blanks into None and enforcing its length"""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    max_length, _ = _TEXT_FIELDS[field]
    if len(value) > max_length:
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} must be at most {max_length} characters")
    return value


def _canonical_condition(condition: Optional[str]) -> str:
    for valid in VALID_CONDITIONS:
        if condition and valid.lower() == condition.lower():
            return valid
    raise ValidationError(f"Invalid condition. Must be one of: {', '.join(VALID_CONDITIONS)}")


class ListingStore:
    """Owns Listing records and their availability status.

    The status setters overwrite unconditionally. Which transition is legal is
    decided by the exchange coordinator through ``bookswap.transitions``.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repository = ListingRepository(session)

    def create(
        self,
        owner_id: int,
        title: str,
        author: str,
        condition: str,
        sharing_mode: SharingMode,
        max_lending_days: Optional[int] = None,
        genre: Optional[str] = None,
        isbn: Optional[str] = None,
        description: Optional[str] = None,
        pickup_location: Optional[str] = None
    ) -> Listing:
        """Create a new AVAILABLE listing.

        Args:
            owner_id: The owner's user ID
            title: Book title
            author: Book author
            condition: One of New, Like New, Good, Fair, Poor (any casing)
            sharing_mode: How the book is shared
            max_lending_days: Longest loan the owner accepts, required for LEND only
            genre: Optional genre
            isbn: Optional ISBN
            description: Optional description
            pickup_location: Optional human-readable pickup place

        Returns:
            The created Listing object

        Raises:
            ValidationError: If a required field is missing or a value is malformed
        """
        if owner_id is None:
            raise ValidationError("Owner ID is required")
        title = _clean('title', title)
        author = _clean('author', author)
        if title is None:
            raise ValidationError("Title is required")
        if author is None:
            raise ValidationError("Author is required")
        condition = _clean('condition', condition)
        if condition is None:
            raise ValidationError("Condition is required")
        condition = _canonical_condition(condition)
        try:
            sharing_mode = SharingMode(sharing_mode)
        except ValueError:
            raise ValidationError(f"Unknown sharing mode: {sharing_mode}") from None

        if sharing_mode == SharingMode.LEND:
            if not isinstance(max_lending_days, int) or isinstance(max_lending_days, bool) or max_lending_days <= 0:
                raise ValidationError("Lending listings need a positive maximum lending period")
        elif max_lending_days is not None:
            raise ValidationError("Only lending listings have a maximum lending period")

        with atomic(self.session):
            listing = self.repository.add(Listing(
                owner_id=owner_id,
                title=title,
                author=author,
                condition=condition,
                genre=_clean('genre', genre),
                isbn=_clean('isbn', isbn),
                description=_clean('description', description),
                pickup_location=_clean('pickup_location', pickup_location),
                sharing_mode=sharing_mode,
                status=ListingStatus.AVAILABLE,
                max_lending_days=max_lending_days
            ))
        logger.info(f"Listing {listing.id} created by user {owner_id} for {sharing_mode.value}")
        return listing

    def get(self, listing_id: int) -> Listing:
        """Get a listing by ID.

        Raises:
            NotFound: If no listing has this ID
        """
        listing = self.repository.get_by_id(listing_id)
        if listing is None:
            raise NotFound(f"Listing not found with id: {listing_id}")
        return listing

    def update_details(self, listing_id: int, owner_id: int, **fields: Optional[str]) -> Listing:
        """Edit the descriptive fields of a listing.

        Fields left as None are untouched. A blank optional field is cleared;
        a blank required field (title, author, condition) is ignored.

        Args:
            listing_id: The listing to edit
            owner_id: The caller, who must own the listing
            fields: Any of title, author, genre, isbn, condition, description, pickup_location

        Returns:
            The updated Listing object
        """
        unknown = set(fields) - set(_TEXT_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with atomic(self.session):
            listing = self.get(listing_id)
            if listing.owner_id != owner_id:
                raise Forbidden("You can only edit your own books")
            for field, value in fields.items():
                if value is None:
                    continue
                cleaned = _clean(field, value)
                _, required = _TEXT_FIELDS[field]
                if cleaned is None and required:
                    continue
                if field == 'condition':
                    cleaned = _canonical_condition(cleaned)
                setattr(listing, field, cleaned)
            self.session.flush()
        return listing

    def delete(self, listing_id: int, requester_owner_id: int) -> None:
        """Remove a listing. Only its owner may do so, and only while it is AVAILABLE.

        Raises:
            NotFound: If no listing has this ID
            Forbidden: If the caller does not own the listing
            InvalidState: If the listing is involved in, or done with, an exchange
        """
        with atomic(self.session):
            listing = self.get(listing_id)
            if listing.owner_id != requester_owner_id:
                raise Forbidden("You can only delete your own books")
            if listing.status != ListingStatus.AVAILABLE:
                raise InvalidState(f"Listing {listing_id} is {listing.status.value} and cannot be deleted")
            self.repository.delete(listing)
        logger.info(f"Listing {listing_id} deleted by its owner {requester_owner_id}")

    # Status setters. Idempotent, no transition validation.

    def _set_status(self, listing_id: int, status: ListingStatus) -> Listing:
        with atomic(self.session):
            listing = self.get(listing_id)
            if listing.status != status:
                logger.info(f"Listing {listing_id}: {listing.status.value} -> {status.value}")
                listing.status = status
                self.session.flush()
        return listing

    def set_available(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.AVAILABLE)

    def set_unavailable(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.UNAVAILABLE)

    def set_exchange_in_progress(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.EXCHANGE_IN_PROGRESS)

    def set_currently_lent_out(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.CURRENTLY_LENT_OUT)

    def set_given_away(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.GIVEN_AWAY)

    def set_swapped(self, listing_id: int) -> Listing:
        return self._set_status(listing_id, ListingStatus.SWAPPED)

    def set_status(self, listing_id: int, status: ListingStatus) -> Listing:
        """Dispatch to the named setter for ``status``"""
        setters = {
            ListingStatus.AVAILABLE: self.set_available,
            ListingStatus.UNAVAILABLE: self.set_unavailable,
            ListingStatus.EXCHANGE_IN_PROGRESS: self.set_exchange_in_progress,
            ListingStatus.CURRENTLY_LENT_OUT: self.set_currently_lent_out,
            ListingStatus.GIVEN_AWAY: self.set_given_away,
            ListingStatus.SWAPPED: self.set_swapped,
        }
        return setters[status](listing_id)

    # Queries

    def list_by_owner(self, owner_id: int, available_only: bool = False) -> List[Listing]:
        return self.repository.get_by_owner(owner_id, available_only=available_only)

    def list_by_status(self, status: ListingStatus) -> List[Listing]:
        return self.repository.get_by_status(status)

    def list_available(self, sharing_mode: Optional[SharingMode] = None) -> List[Listing]:
        return self.repository.get_available(sharing_mode)

    def search(self, query: Optional[str]) -> List[Listing]:
        """Search available listings; an empty query returns every available listing"""
        if query is None or not query.strip():
            return self.list_available()
        return self.repository.search_available(query.strip())

    def recent(self, limit: int = 10) -> List[Listing]:
        return self.repository.get_recent(limit)

    def stats(self) -> Dict[str, int]:
        return {
            "available_listings": self.repository.count_available(),
            "listings_with_location": self.repository.count_with_pickup_location(),
        }
