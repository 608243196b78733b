from typing import Iterable, List, Optional
from sqlalchemy import func, desc
from sqlalchemy.orm import Session
from bookswap.sa.models import ExchangeRequest, RequestStatus, ACTIVE_REQUEST_STATUSES

class ExchangeRequestRepository:
    """Repository for managing ExchangeRequest entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _newest_first(self, query):
        return query.order_by(desc(ExchangeRequest.created_at), desc(ExchangeRequest.id))

    def get_by_id(self, request_id: int) -> Optional[ExchangeRequest]:
        """Get a request by its ID.
        
        Args:
            request_id: The ID of the request to retrieve
            
        Returns:
            The ExchangeRequest object if found, None otherwise
        """
        return self.session.query(ExchangeRequest).filter(ExchangeRequest.id == request_id).one_or_none()

    def lock_by_id(self, request_id: int) -> Optional[ExchangeRequest]:
        """Get a request for update, refreshing it from the database.
        
        Args:
            request_id: The ID of the request to lock
            
        Returns:
            The ExchangeRequest object if found, None otherwise
        """
        return (
            self.session.query(ExchangeRequest)
            .filter(ExchangeRequest.id == request_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def get_by_requester(self, requester_id: int) -> List[ExchangeRequest]:
        return self._newest_first(
            self.session.query(ExchangeRequest).filter(ExchangeRequest.requester_id == requester_id)
        ).all()

    def get_by_owner(self, owner_id: int) -> List[ExchangeRequest]:
        return self._newest_first(
            self.session.query(ExchangeRequest).filter(ExchangeRequest.owner_id == owner_id)
        ).all()

    def get_active_by_requester(self, requester_id: int) -> List[ExchangeRequest]:
        """Get a requester's PENDING and ACCEPTED requests.
        
        Args:
            requester_id: The requester's user ID
            
        Returns:
            List of ExchangeRequest objects, newest first
        """
        return self._newest_first(
            self.session.query(ExchangeRequest).filter(
                ExchangeRequest.requester_id == requester_id,
                ExchangeRequest.status.in_(list(ACTIVE_REQUEST_STATUSES))
            )
        ).all()

    def get_active_by_owner(self, owner_id: int) -> List[ExchangeRequest]:
        """Get the PENDING and ACCEPTED requests an owner has received.
        
        Args:
            owner_id: The owner's user ID
            
        Returns:
            List of ExchangeRequest objects, newest first
        """
        return self._newest_first(
            self.session.query(ExchangeRequest).filter(
                ExchangeRequest.owner_id == owner_id,
                ExchangeRequest.status.in_(list(ACTIVE_REQUEST_STATUSES))
            )
        ).all()

    def get_by_listing(self, listing_id: int, status: Optional[RequestStatus] = None) -> List[ExchangeRequest]:
        """Get requests targeting a listing.
        
        Args:
            listing_id: The ID of the requested listing
            status: Only return requests in this status
            
        Returns:
            List of ExchangeRequest objects, newest first
        """
        query = self.session.query(ExchangeRequest).filter(ExchangeRequest.listing_id == listing_id)
        if status is not None:
            query = query.filter(ExchangeRequest.status == status)
        return self._newest_first(query).all()

    def get_by_status(self, status: RequestStatus) -> List[ExchangeRequest]:
        return self._newest_first(
            self.session.query(ExchangeRequest).filter(ExchangeRequest.status == status)
        ).all()

    def get_active_holding(self, listing_id: int) -> List[ExchangeRequest]:
        """Get the active requests that hold a listing on either side of the exchange.
        
        Args:
            listing_id: The listing ID, as requested or as offered
            
        Returns:
            List of ExchangeRequest objects
        """
        return (
            self.session.query(ExchangeRequest)
            .filter(
                (ExchangeRequest.listing_id == listing_id)
                | (ExchangeRequest.offered_listing_id == listing_id),
                ExchangeRequest.status.in_(list(ACTIVE_REQUEST_STATUSES))
            )
            .all()
        )

    def has_pending(self, listing_id: int, requester_id: int) -> bool:
        """Check whether a requester already has a PENDING request on a listing.
        
        Args:
            listing_id: The requested listing ID
            requester_id: The requester's user ID
            
        Returns:
            True if such a request exists
        """
        return self.session.query(
            self.session.query(ExchangeRequest)
            .filter(
                ExchangeRequest.listing_id == listing_id,
                ExchangeRequest.requester_id == requester_id,
                ExchangeRequest.status == RequestStatus.PENDING
            )
            .exists()
        ).scalar()

    def count_by_owner(self, owner_id: int, statuses: Iterable[RequestStatus]) -> int:
        return (
            self.session.query(func.count(ExchangeRequest.id))
            .filter(
                ExchangeRequest.owner_id == owner_id,
                ExchangeRequest.status.in_(list(statuses))
            )
            .scalar()
        )

    def count_by_requester(self, requester_id: int, statuses: Iterable[RequestStatus]) -> int:
        return (
            self.session.query(func.count(ExchangeRequest.id))
            .filter(
                ExchangeRequest.requester_id == requester_id,
                ExchangeRequest.status.in_(list(statuses))
            )
            .scalar()
        )

    def add(self, request: ExchangeRequest) -> ExchangeRequest:
        self.session.add(request)
        self.session.flush()
        return request
