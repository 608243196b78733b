from typing import Dict, List, Optional
from sqlalchemy import func, desc, or_
from sqlalchemy.orm import Session
from bookswap.sa.models import Listing, ListingStatus, SharingMode

class ListingRepository:
    """Repository for managing Listing entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, listing_id: int) -> Optional[Listing]:
        """Get a listing by its ID.
        
        Args:
            listing_id: The ID of the listing to retrieve
            
        Returns:
            The Listing object if found, None otherwise
        """
        return self.session.query(Listing).filter(Listing.id == listing_id).one_or_none()

    def lock_by_ids(self, listing_ids: List[int]) -> Dict[int, Listing]:
        """Load listings for update, locking rows in ascending ID order.

        Locking in a fixed order keeps two swaps that reference each other's
        listings from deadlocking. Rows are refreshed from the database even if
        the session already holds them.
        
        Args:
            listing_ids: IDs of the listings to lock
            
        Returns:
            Mapping of ID to Listing for every ID that exists
        """
        locked = {}
        for listing_id in sorted(set(listing_ids)):
            listing = (
                self.session.query(Listing)
                .filter(Listing.id == listing_id)
                .with_for_update()
                .populate_existing()
                .one_or_none()
            )
            if listing is not None:
                locked[listing_id] = listing
        return locked

    def get_by_owner(self, owner_id: int, available_only: bool = False) -> List[Listing]:
        """Get every listing of an owner, newest first.
        
        Args:
            owner_id: The owner's user ID
            available_only: Only return AVAILABLE listings
            
        Returns:
            List of Listing objects
        """
        query = self.session.query(Listing).filter(Listing.owner_id == owner_id)
        if available_only:
            query = query.filter(Listing.status == ListingStatus.AVAILABLE)
        return query.order_by(desc(Listing.created_at), desc(Listing.id)).all()

    def get_by_status(self, status: ListingStatus) -> List[Listing]:
        return (
            self.session.query(Listing)
            .filter(Listing.status == status)
            .order_by(Listing.id)
            .all()
        )

    def get_available(self, sharing_mode: Optional[SharingMode] = None) -> List[Listing]:
        """Get available listings, optionally restricted to one sharing mode.
        
        Args:
            sharing_mode: Only return listings with this sharing mode
            
        Returns:
            List of available Listing objects, newest first
        """
        query = self.session.query(Listing).filter(Listing.status == ListingStatus.AVAILABLE)
        if sharing_mode is not None:
            query = query.filter(Listing.sharing_mode == sharing_mode)
        return query.order_by(desc(Listing.created_at), desc(Listing.id)).all()

    def search_available(self, query: str, limit: int = 50) -> List[Listing]:
        """Search available listings by title, author or genre.
        
        Args:
            query: Case-insensitive search string
            limit: Maximum number of results to return (default: 50)
            
        Returns:
            List of matching Listing objects
        """
        pattern = f"%{query}%"
        return (
            self.session.query(Listing)
            .filter(
                Listing.status == ListingStatus.AVAILABLE,
                or_(
                    Listing.title.ilike(pattern),
                    Listing.author.ilike(pattern),
                    Listing.genre.ilike(pattern)
                )
            )
            .order_by(Listing.title)
            .limit(limit)
            .all()
        )

    def get_recent(self, limit: int = 10) -> List[Listing]:
        return (
            self.session.query(Listing)
            .filter(Listing.status == ListingStatus.AVAILABLE)
            .order_by(desc(Listing.created_at), desc(Listing.id))
            .limit(limit)
            .all()
        )

    def count_available(self) -> int:
        return (
            self.session.query(func.count(Listing.id))
            .filter(Listing.status == ListingStatus.AVAILABLE)
            .scalar()
        )

    def count_with_pickup_location(self) -> int:
        return (
            self.session.query(func.count(Listing.id))
            .filter(Listing.pickup_location.is_not(None))
            .scalar()
        )

    def add(self, listing: Listing) -> Listing:
        """Stage a new listing and flush it so it gets an ID.
        
        Args:
            listing: The Listing object to persist
            
        Returns:
            The same Listing object
        """
        self.session.add(listing)
        self.session.flush()
        return listing

    def delete(self, listing: Listing) -> None:
        self.session.delete(listing)
        self.session.flush()
