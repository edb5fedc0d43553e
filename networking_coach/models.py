"""
SQLAlchemy database models for the Networking Coach application.

Every table except ``users`` carries a ``user_id`` owner column; the owner
policies in :mod:`networking_coach.policies` restrict access to it.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Text, Boolean, DateTime, ForeignKey,
    CheckConstraint, Index
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageType(enum.Enum):
    """Kind of outreach message."""
    LINKEDIN = "linkedin"
    INFORMATIONAL = "informational"
    RECRUITER_FOLLOWUP = "recruiter-followup"
    MENTOR_REQUEST = "mentor-request"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class ActionType(enum.Enum):
    """Usage event recorded in message_analytics."""
    GENERATED = "generated"
    COPIED = "copied"
    FAVORITED = "favorited"
    VIEWED = "viewed"

    @classmethod
    def values(cls) -> list[str]:
        return [a.value for a in cls]


def _in_check(column: str, values: list[str], name: str) -> CheckConstraint:
    quoted = ", ".join(f"'{v}'" for v in values)
    return CheckConstraint(f"{column} IN ({quoted})", name=name)


class User(Base):
    """Account used for authentication."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    messages = relationship("NetworkingMessage", back_populates="user", cascade="all, delete-orphan")
    analytics = relationship("MessageAnalytics", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"


class Profile(Base):
    """Public profile data for a user, created together with the account."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile {self.full_name or self.email}>"


class NetworkingMessage(Base):
    """A generated (or template-rendered) outreach message."""
    __tablename__ = "networking_messages"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message_type = Column(String(32), nullable=False)
    recipient_name = Column(Text, nullable=False)
    recipient_title = Column(Text, nullable=True)
    company = Column(Text, nullable=False)
    purpose = Column(Text, nullable=True)
    generated_message = Column(Text, nullable=False)
    is_favorite = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="messages")
    analytics = relationship("MessageAnalytics", back_populates="message", passive_deletes="all")

    __table_args__ = (
        _in_check("message_type", MessageType.values(), "ck_networking_messages_type"),
        Index("ix_networking_messages_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<NetworkingMessage {self.message_type} to {self.recipient_name}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message_type": self.message_type,
            "recipient_name": self.recipient_name,
            "recipient_title": self.recipient_title,
            "company": self.company,
            "purpose": self.purpose,
            "generated_message": self.generated_message,
            "is_favorite": bool(self.is_favorite),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class MessageAnalytics(Base):
    """Usage event for a message (generated, copied, favorited, viewed)."""
    __tablename__ = "message_analytics"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message_id = Column(
        String(36), ForeignKey("networking_messages.id", ondelete="CASCADE"), nullable=True
    )
    action_type = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="analytics")
    message = relationship("NetworkingMessage", back_populates="analytics")

    __table_args__ = (
        _in_check("action_type", ActionType.values(), "ck_message_analytics_action"),
    )

    def __repr__(self):
        return f"<MessageAnalytics {self.action_type} message={self.message_id}>"

