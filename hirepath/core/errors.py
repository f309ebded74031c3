"""Exception hierarchy for HirePath.

Validation and business-rule errors are raised synchronously to the caller.
Only ``TransientStoreError`` is retried before it surfaces as a
``PersistenceError``.
"""


class HirePathError(Exception):
    """Base class for all HirePath errors."""


class InputValidationError(HirePathError):
    """Input rejected before any processing (file type, size, rating...)."""


class NotFoundError(HirePathError):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class AuthorizationError(HirePathError):
    """The caller's role may not perform this operation."""


class LifecycleError(HirePathError):
    """Base class for interview lifecycle rule violations."""


class InvalidTransitionError(LifecycleError):
    """Requested interview status transition is not allowed."""

    def __init__(self, candidate_id: str, current: str, target: str, reason: str | None = None):
        message = f"Cannot move candidate {candidate_id} from '{current}' to '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.candidate_id = candidate_id
        self.current = current
        self.target = target


class NotQualifiedError(LifecycleError):
    """Candidate rank is below the invitation threshold."""


class SlotUnavailableError(LifecycleError):
    """Selected (date, time) is not one of the offered slots."""


class DuplicateFeedbackError(HirePathError):
    """The recruiter already reviewed this candidate."""


class PersistenceError(HirePathError):
    """A storage write failed and was not applied."""


class TransientStoreError(PersistenceError):
    """Storage hiccup worth retrying (I/O error, lock contention)."""


class RecordingError(HirePathError):
    """Video capture or upload failed."""
