# bookswap/sa/models/exchange_request.py
from typing import Tuple
from sqlalchemy import Integer, String, CheckConstraint, Index, text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, enum_column
from .enums import SharingMode, RequestStatus

# Rows matching this predicate hold their listing(s)
ACTIVE_STATUS_SQL = text("status IN ('pending', 'accepted')")

class ExchangeRequest(Base, TimestampMixin):
    """One user's bid to acquire a listing under the listing's sharing mode.

    Only swap requests carry ``offered_listing_id`` and only lend requests carry
    ``requested_duration_days``; the check constraints reject any other mix.
    """
    __tablename__ = 'exchange_request'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Plain ids: request history outlives a listing removed by its owner
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    requester_id: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    request_type: Mapped[SharingMode] = mapped_column(enum_column(SharingMode), nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        enum_column(RequestStatus), nullable=False, default=RequestStatus.PENDING
    )
    message: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    offered_listing_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    requested_duration_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    conversation = relationship('Conversation', back_populates='request', uselist=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            "(request_type = 'swap' AND offered_listing_id IS NOT NULL AND offered_listing_id != listing_id)"
            " OR (request_type != 'swap' AND offered_listing_id IS NULL)",
            name='ck_exchange_request_offered_listing',
        ),
        CheckConstraint(
            "(request_type = 'lend' AND requested_duration_days IS NOT NULL AND requested_duration_days > 0)"
            " OR (request_type != 'lend' AND requested_duration_days IS NULL)",
            name='ck_exchange_request_duration',
        ),
        CheckConstraint('requester_id != owner_id', name='ck_exchange_request_not_self'),

        # At most one active request may hold a listing, on either side of a swap
        Index('uix_exchange_request_active_listing', 'listing_id', unique=True,
              sqlite_where=ACTIVE_STATUS_SQL, postgresql_where=ACTIVE_STATUS_SQL),
        Index('uix_exchange_request_active_offered', 'offered_listing_id', unique=True,
              sqlite_where=ACTIVE_STATUS_SQL, postgresql_where=ACTIVE_STATUS_SQL),

        Index('idx_exchange_request_requester_id', 'requester_id'),
        Index('idx_exchange_request_owner_id', 'owner_id'),
        Index('idx_exchange_request_status', 'status'),
    )

    @property
    def listing_ids(self) -> Tuple[int, ...]:
        """Every listing this request moves, the primary one first"""
        if self.offered_listing_id is not None:
            return (self.listing_id, self.offered_listing_id)
        return (self.listing_id,)

    def __repr__(self) -> str:
        return (f"<ExchangeRequest id={self.id} type={self.request_type.value} "
                f"status={self.status.value} listing={self.listing_id}>")
