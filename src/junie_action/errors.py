"""Exception types raised across the action."""

from __future__ import annotations

# GraphQL/REST failures that will not go away on retry
NON_RETRYABLE_STATUSES = frozenset({401, 403, 404, 422})


class GitHubAPIError(RuntimeError):
    """A GitHub REST or GraphQL call failed.

    ``status_code`` is ``None`` when the request never got a response
    (connection reset, DNS failure, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None, operation: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation

    @property
    def retryable(self) -> bool:
        return self.status_code not in NON_RETRYABLE_STATUSES


class GitOperationError(RuntimeError):
    """A git command exited non-zero."""


class InputTooLargeError(ValueError):
    """A prompt or task text exceeds the workflow input limit."""

    def __init__(self, message: str, actual_size: int, max_size: int) -> None:
        super().__init__(message)
        self.actual_size = actual_size
        self.max_size = max_size
