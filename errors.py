"""
Typed failures raised by the time tracker.
All derive from ValueError so callers catching ValueError around store calls keep working.
"""


class TimeTrackerError(ValueError):
    """Base class for time tracker errors."""


class CurrentUserNotSet(TimeTrackerError):
    """Operation needs an authenticated actor but none is set."""

    def __init__(self, message: str = "Current user is not set.") -> None:
        super().__init__(message)


class AuthorizationDenied(TimeTrackerError):
    """Actor lacks rights for the operation."""


class ValidationError(TimeTrackerError):
    """Malformed input."""


class InvalidRangeError(ValidationError):
    """End time is not after start time."""

    def __init__(self, message: str = "End time must be after start time.") -> None:
        super().__init__(message)


class ConflictError(TimeTrackerError):
    """Uniqueness violation: a running timer or an existing record."""

    def __init__(
        self,
        message: str,
        *,
        entry_id: int | None = None,
        project_id: int | None = None,
        project_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.entry_id = entry_id
        self.project_id = project_id
        self.project_name = project_name


class DuplicateAssignmentError(ConflictError):
    """User is already assigned to the project."""


class NotFoundError(TimeTrackerError):
    """Resource is absent, or not visible to the actor. The two cases are not distinguished."""


class NotRunningError(TimeTrackerError):
    """Stop requested on an entry that is not running."""

    def __init__(self, message: str = "Timer is not running.") -> None:
        super().__init__(message)
