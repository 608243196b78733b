# bookswap/sa/models/listing.py
from sqlalchemy import Integer, String, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin, enum_column
from .enums import SharingMode, ListingStatus

class Listing(Base, TimestampMixin):
    """A book an owner offers for give-away, lending or swapping."""
    __tablename__ = 'listing'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    genre: Mapped[str | None] = mapped_column(String(50), nullable=True)
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    condition: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    pickup_location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    sharing_mode: Mapped[SharingMode] = mapped_column(enum_column(SharingMode), nullable=False)
    status: Mapped[ListingStatus] = mapped_column(
        enum_column(ListingStatus), nullable=False, default=ListingStatus.AVAILABLE
    )
    max_lending_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            "(sharing_mode = 'lend' AND max_lending_days IS NOT NULL AND max_lending_days > 0)"
            " OR (sharing_mode != 'lend' AND max_lending_days IS NULL)",
            name='ck_listing_max_lending_days',
        ),
        Index('idx_listing_owner_id', 'owner_id'),
        Index('idx_listing_status', 'status'),
        Index('idx_listing_title', 'title'),
    )

    @property
    def is_available(self) -> bool:
        return self.status == ListingStatus.AVAILABLE

    def __repr__(self) -> str:
        return f"<Listing id={self.id} mode={self.sharing_mode.value} status={self.status.value}>"
