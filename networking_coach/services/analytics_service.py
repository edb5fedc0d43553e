"""
Usage analytics service.

Records message events and summarizes them per user.
"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import ActionType, MessageAnalytics, NetworkingMessage, User


class AnalyticsService:
    """Service for recording and reading message analytics."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def track(self, action: ActionType, message_id: Optional[str] = None) -> MessageAnalytics:
        """Record a usage event, optionally tied to a message."""
        event = MessageAnalytics(
            user_id=self.user.id,
            message_id=message_id,
            action_type=action.value,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def recent(self, limit: int = 50) -> list[MessageAnalytics]:
        """Get the most recent events, newest first."""
        return (
            self.db.query(MessageAnalytics)
            .filter(MessageAnalytics.user_id == self.user.id)
            .order_by(MessageAnalytics.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_stats(self) -> dict:
        """Count events by action type along with message totals."""
        action_counts = dict(
            self.db.query(MessageAnalytics.action_type, func.count(MessageAnalytics.id))
            .filter(MessageAnalytics.user_id == self.user.id)
            .group_by(MessageAnalytics.action_type)
            .all()
        )

        messages = self.db.query(NetworkingMessage).filter(NetworkingMessage.user_id == self.user.id)
        by_type = dict(
            self.db.query(NetworkingMessage.message_type, func.count(NetworkingMessage.id))
            .filter(NetworkingMessage.user_id == self.user.id)
            .group_by(NetworkingMessage.message_type)
            .all()
        )

        return {
            "actions": {action: action_counts.get(action, 0) for action in ActionType.values()},
            "messages": messages.count(),
            "favorites": messages.filter(NetworkingMessage.is_favorite.is_(True)).count(),
            "by_type": by_type,
        }
