"""Error types for the coaching core.

Distinct error types let request handlers map failures precisely:
validation failures reject the single request, not-found errors map to a
404-equivalent, upstream failures are either absorbed (retrieval) or fatal to
the turn (language model), and audit write failures never reach the user.
"""

from pathlib import Path


class CoachingError(Exception):
    """Base exception for all coaching core errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailure(CoachingError):
    """Raised when input to a planning or safety call is malformed."""


class SessionAlreadyCompletedError(ValidationFailure):
    """Raised when completion is requested for a session that is already completed.

    Completed sessions are immutable, so a second completion is rejected
    instead of overwriting the recorded feedback.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session already completed: {session_id}")


class CatalogError(CoachingError):
    """Raised when the movement catalog is missing or fails schema validation.

    This is a startup error: the process must not serve requests with an
    unvalidated catalog.
    """

    def __init__(self, path: Path | str, message: str):
        self.path = Path(path)
        super().__init__(f"Invalid movement catalog {self.path}: {message}")


class NotFoundError(CoachingError):
    """Raised when a referenced session, plan or user does not exist."""


class SessionNotFoundError(NotFoundError):
    """Raised when a session id is not part of the given plan."""

    def __init__(self, session_id: str, plan_id: str):
        self.session_id = session_id
        self.plan_id = plan_id
        super().__init__(f"Session {session_id} not found in plan {plan_id}")


class UpstreamFailure(CoachingError):
    """Raised when an external collaborator (retrieval, language model) fails."""


class RetrievalError(UpstreamFailure):
    """Raised by retrieval clients. The orchestrator absorbs it and answers ungrounded."""


class LanguageModelError(UpstreamFailure):
    """Raised when the hosted language model call fails.

    Never swallowed: without a model reply there is no safe content to return.
    """

    def __init__(self, model: str, message: str):
        self.model = model
        super().__init__(f"Failed to get response from coach model {model}: {message}")


class AuditWriteError(CoachingError):
    """Raised by audit writers. The audit logger always absorbs it."""
