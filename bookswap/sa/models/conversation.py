# bookswap/sa/models/conversation.py
from datetime import datetime, UTC
from sqlalchemy import Integer, Text, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, enum_column
from .enums import ConversationStatus, MessageKind

class Conversation(Base, TimestampMixin):
    """Coordination channel opened once an exchange request is accepted."""
    __tablename__ = 'conversation'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    request_id: Mapped[int] = mapped_column(ForeignKey('exchange_request.id'), nullable=False, unique=True)
    participant_a: Mapped[int] = mapped_column(Integer, nullable=False)  # requester
    participant_b: Mapped[int] = mapped_column(Integer, nullable=False)  # owner
    status: Mapped[ConversationStatus] = mapped_column(
        enum_column(ConversationStatus), nullable=False, default=ConversationStatus.ACTIVE
    )

    # Relationships
    request = relationship('ExchangeRequest', back_populates='conversation')
    messages = relationship('Message', back_populates='conversation', order_by='Message.id')

    __table_args__ = (
        Index('idx_conversation_participant_a', 'participant_a'),
        Index('idx_conversation_participant_b', 'participant_b'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == ConversationStatus.ACTIVE

    def involves(self, user_id: int) -> bool:
        return user_id in (self.participant_a, self.participant_b)

class Message(Base):
    """Append-only entry in a conversation log. System entries have no sender."""
    __tablename__ = 'message'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey('conversation.id'), nullable=False)
    sender_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[MessageKind] = mapped_column(enum_column(MessageKind), nullable=False, default=MessageKind.TEXT)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(UTC))

    # Relationships
    conversation = relationship('Conversation', back_populates='messages')

    __table_args__ = (
        Index('idx_message_conversation_created', 'conversation_id', 'created_at'),
    )
