class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTaskError(ValidationError):
    """Raised when a check-in is attempted with a blank task."""


class AlreadyActiveError(DomainError):
    """Raised when a user checks in while a session is still open."""


class SessionClosedError(DomainError):
    """Raised when a note or tag targets a session that is not open."""


class NotActiveError(DomainError):
    """Raised when checking out a session that is closed or unknown."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StoreUnavailableError(DomainError):
    """Raised when the record store cannot be reached or refuses the call."""


class ClockAnomalyWarning(UserWarning):
    """Data-quality flag for a session whose end precedes its start.

    Never raised: durations are clamped to zero and the flag is logged and
    collected by callers that report on data quality.
    """

    def __init__(self, session_id, raw_seconds: float):
        super().__init__(f"session {session_id} has negative duration ({raw_seconds:.0f}s)")
        self.session_id = session_id
        self.raw_seconds = raw_seconds
