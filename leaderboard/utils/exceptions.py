"""
Custom exceptions for the leaderboard query core with user-friendly error messages.
"""

class LeaderboardException(Exception):
    """Base exception for leaderboard-related errors."""
    retryable = False

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class ValidationError(LeaderboardException):
    """Raised when a query scope or limit is outside the allowed bounds."""
    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid {field}: {reason}",
            reason
        )
        self.field = field

class TransientStoreError(LeaderboardException):
    """Raised when the score or profile store is unreachable, slow or saturated."""
    retryable = True

    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Store error during {operation}: {details}",
            "Leaderboard storage is temporarily unavailable. Please try again later."
        )
        self.operation = operation
        self.details = details

class LeaderboardUnavailableError(LeaderboardException):
    """Raised by the query façade when a leaderboard could not be produced."""
    def __init__(self, scope: str, cause: LeaderboardException):
        super().__init__(
            f"Failed to fetch leaderboard for {scope}: {cause}",
            cause.user_message
        )
        self.scope = scope
        self.retryable = cause.retryable
