"""Exception types raised by Standup Pulse."""

from __future__ import annotations


class StandupError(Exception):
    """Base class for Standup Pulse errors."""


class ConfigurationError(StandupError, RuntimeError):
    """Raised when the schedule or roster configuration cannot be used."""


class NotifyError(StandupError):
    """Raised when the standup prompt cannot be delivered to a user."""

    def __init__(self, user_id: str, reason: str) -> None:
        super().__init__(f"Failed to notify {user_id}: {reason}")
        self.user_id = user_id
        self.reason = reason


class SubmissionPostError(StandupError):
    """Raised when a thread root or a thread reply cannot be posted."""

    def __init__(self, date_key: str, reason: str) -> None:
        super().__init__(f"Failed to post update for {date_key}: {reason}")
        self.date_key = date_key
        self.reason = reason


class AckError(StandupError):
    """Raised when the submitter cannot be sent an acknowledgment."""

    def __init__(self, user_id: str, reason: str) -> None:
        super().__init__(f"Failed to acknowledge {user_id}: {reason}")
        self.user_id = user_id
        self.reason = reason


__all__ = [
    "StandupError",
    "ConfigurationError",
    "NotifyError",
    "SubmissionPostError",
    "AckError",
]
