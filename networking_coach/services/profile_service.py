"""
Profile service.
"""

from typing import Optional
from sqlalchemy.orm import Session

from ..models import Profile, User


class ProfileService:
    """Service for reading and updating the current user's profile."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def get(self) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == self.user.id).first()

    def update(self, full_name: Optional[str] = None, email: Optional[str] = None) -> Profile:
        """Update the profile, creating it if it went missing."""
        profile = self.get()
        if profile is None:
            profile = Profile(user_id=self.user.id, email=self.user.email)
            self.db.add(profile)

        if full_name is not None:
            profile.full_name = full_name
        if email is not None:
            profile.email = email

        self.db.flush()
        return profile

    def to_dict(self) -> dict:
        profile = self.get()
        return {
            "id": self.user.id,
            "email": self.user.email,
            "fullName": profile.full_name if profile else None,
            "profileEmail": profile.email if profile else self.user.email,
            "createdAt": self.user.created_at.isoformat() if self.user.created_at else None,
        }
