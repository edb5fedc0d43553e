"""
Services layer for the Networking Coach application.
"""

from .analytics_service import AnalyticsService
from .message_service import MessageService
from .profile_service import ProfileService

__all__ = ["AnalyticsService", "MessageService", "ProfileService"]
