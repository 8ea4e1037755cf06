"""
Error types raised by the sync pipeline.
"""

from typing import Optional


class ChangelogSyncError(Exception):
    """Base class for all sync pipeline errors."""


class AuthenticationError(ChangelogSyncError):
    """Webhook signature missing or invalid."""


class SyncError(ChangelogSyncError):
    """
    Failure while loading, converting or pushing changelog pages.
    
    Carries the HTTP status code when the documentation host rejected
    the request.
    """
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotificationError(ChangelogSyncError):
    """Notification endpoint rejected a message."""
