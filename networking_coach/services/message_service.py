"""
Message history service.

Handles CRUD operations for saved networking messages. Copy, favorite,
view and create actions are recorded as analytics events.
"""

from typing import Optional
from sqlalchemy.orm import Session

from ..message_templates import MessageData
from ..models import ActionType, MessageType, NetworkingMessage, User
from .analytics_service import AnalyticsService


class MessageService:
    """Service for managing a user's message history."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user
        self.analytics = AnalyticsService(db, user)

    def get_all(
        self,
        favorites_only: bool = False,
        message_type: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[NetworkingMessage]:
        """Get the user's messages, newest first."""
        query = self.db.query(NetworkingMessage).filter(NetworkingMessage.user_id == self.user.id)

        if favorites_only:
            query = query.filter(NetworkingMessage.is_favorite.is_(True))

        if message_type:
            query = query.filter(NetworkingMessage.message_type == message_type)

        query = query.order_by(NetworkingMessage.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_count(self) -> int:
        """Get total count of messages for the current user."""
        return self.db.query(NetworkingMessage).filter(NetworkingMessage.user_id == self.user.id).count()

    def get_by_id(self, message_id: str) -> Optional[NetworkingMessage]:
        """Get a message by ID (scoped to current user)."""
        return self.db.query(NetworkingMessage).filter(
            NetworkingMessage.id == message_id,
            NetworkingMessage.user_id == self.user.id
        ).first()

    def create(self, data: MessageData, generated_message: str) -> NetworkingMessage:
        """Save a message and record that it was generated."""
        if data.message_type not in MessageType.values():
            raise ValueError(f"Unknown message type: {data.message_type}")
        if not data.is_valid():
            raise ValueError("Recipient name and company are required")
        if not generated_message or not generated_message.strip():
            raise ValueError("Message text is required")

        message = NetworkingMessage(
            user_id=self.user.id,
            message_type=data.message_type,
            recipient_name=data.recipient_name,
            recipient_title=data.recipient_title or None,
            company=data.company,
            purpose=data.purpose or None,
            generated_message=generated_message.strip(),
            is_favorite=False,
        )
        self.db.add(message)
        self.db.flush()

        self.analytics.track(ActionType.GENERATED, message.id)
        return message

    def view(self, message_id: str) -> Optional[NetworkingMessage]:
        """Get a message and record the view."""
        message = self.get_by_id(message_id)
        if message:
            self.analytics.track(ActionType.VIEWED, message.id)
        return message

    def mark_copied(self, message_id: str) -> Optional[NetworkingMessage]:
        """Record that a message was copied to the clipboard."""
        message = self.get_by_id(message_id)
        if message:
            self.analytics.track(ActionType.COPIED, message.id)
        return message

    def toggle_favorite(self, message_id: str) -> Optional[NetworkingMessage]:
        """Flip the favorite flag and record the action."""
        message = self.get_by_id(message_id)
        if not message:
            return None

        message.is_favorite = not message.is_favorite
        self.db.flush()

        self.analytics.track(ActionType.FAVORITED, message.id)
        return message

    def update(self, message_id: str, **kwargs) -> Optional[NetworkingMessage]:
        """Update a message's editable fields."""
        message = self.get_by_id(message_id)
        if not message:
            return None

        editable = ('generated_message', 'recipient_name', 'recipient_title', 'company', 'purpose', 'is_favorite')
        for key, value in kwargs.items():
            if key in editable:
                setattr(message, key, value)

        self.db.flush()
        return message

    def delete(self, message_id: str) -> bool:
        """Delete a message (its analytics go with it)."""
        message = self.get_by_id(message_id)
        if not message:
            return False

        self.db.delete(message)
        self.db.flush()
        return True
