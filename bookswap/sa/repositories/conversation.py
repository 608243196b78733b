from typing import List, Optional
from sqlalchemy import func, desc, or_
from sqlalchemy.orm import Session
from bookswap.sa.models import Conversation, ConversationStatus, Message, MessageKind

class ConversationRepository:
    """Repository for managing Conversation entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, conversation_id: int) -> Optional[Conversation]:
        return self.session.query(Conversation).filter(Conversation.id == conversation_id).one_or_none()

    def lock_by_id(self, conversation_id: int) -> Optional[Conversation]:
        return (
            self.session.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def get_by_request_id(self, request_id: int) -> Optional[Conversation]:
        """Get the conversation opened for an exchange request.
        
        Args:
            request_id: The exchange request ID
            
        Returns:
            The Conversation object if one exists, None otherwise
        """
        return self.session.query(Conversation).filter(Conversation.request_id == request_id).one_or_none()

    def exists_for_request(self, request_id: int) -> bool:
        return self.session.query(
            self.session.query(Conversation).filter(Conversation.request_id == request_id).exists()
        ).scalar()

    def get_for_user(self, user_id: int, status: Optional[ConversationStatus] = None) -> List[Conversation]:
        """Get the conversations a user takes part in.
        
        Args:
            user_id: The participant's user ID
            status: Only return conversations in this status
            
        Returns:
            List of Conversation objects, most recently updated first
        """
        query = self.session.query(Conversation).filter(
            or_(Conversation.participant_a == user_id, Conversation.participant_b == user_id)
        )
        if status is not None:
            query = query.filter(Conversation.status == status)
        return query.order_by(desc(Conversation.updated_at), desc(Conversation.id)).all()

    def add(self, conversation: Conversation) -> Conversation:
        self.session.add(conversation)
        self.session.flush()
        return conversation

class MessageRepository:
    """Repository for the append-only Message log."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_conversation(self, conversation_id: int) -> List[Message]:
        """Get the full log of a conversation, oldest first.
        
        Args:
            conversation_id: The conversation ID
            
        Returns:
            List of Message objects ordered by creation time
        """
        return (
            self.session.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)
            .all()
        )

    def get_recent(self, conversation_id: int, limit: int = 50) -> List[Message]:
        """Get the most recent messages of a conversation, newest first.
        
        Args:
            conversation_id: The conversation ID
            limit: Maximum number of messages to return (default: 50)
            
        Returns:
            List of Message objects
        """
        return (
            self.session.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(desc(Message.created_at), desc(Message.id))
            .limit(limit)
            .all()
        )

    def get_latest(self, conversation_id: int) -> Optional[Message]:
        recent = self.get_recent(conversation_id, limit=1)
        return recent[0] if recent else None

    def count_unread(self, conversation_id: int, user_id: int) -> int:
        """Count text messages in a conversation that the user did not write.
        
        Args:
            conversation_id: The conversation ID
            user_id: The reader's user ID
            
        Returns:
            Number of such messages
        """
        return (
            self.session.query(func.count(Message.id))
            .filter(
                Message.conversation_id == conversation_id,
                Message.kind == MessageKind.TEXT,
                Message.sender_id != user_id
            )
            .scalar()
        )

    def count_unread_for_user(self, user_id: int) -> int:
        """Count unread text messages across every conversation of a user.
        
        Args:
            user_id: The reader's user ID
            
        Returns:
            Total number of such messages
        """
        return (
            self.session.query(func.count(Message.id))
            .join(Conversation, Message.conversation_id == Conversation.id)
            .filter(
                or_(Conversation.participant_a == user_id, Conversation.participant_b == user_id),
                Message.kind == MessageKind.TEXT,
                Message.sender_id != user_id
            )
            .scalar()
        )

    def add(self, message: Message) -> Message:
        self.session.add(message)
        self.session.flush()
        return message
