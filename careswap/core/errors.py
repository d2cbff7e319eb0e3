from __future__ import annotations


class CareSwapError(Exception):
    """Base class for every error the swap workflow surfaces to callers."""

    retryable = False


class SwapValidationError(CareSwapError):
    """Raised when a draft fails boundary validation (reason too short, no target, self swap).

    Never reaches the backend. ``errors`` maps field name to message so the
    caller can show each problem next to its input.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(errors.values()))


class SubmissionError(CareSwapError):
    """Raised when the persistence collaborator rejects a request or cannot be reached."""

    retryable = True

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = True):
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class DataAbsenceError(CareSwapError):
    """Raised when the source shift or the requesting nurse is missing from the supplied pools."""

    def __init__(self, message: str = "invalid shift or nurse data"):
        super().__init__(message)


class DuplicateAssignmentError(CareSwapError):
    """Raised when a nurse is assigned to a shift they already hold."""


class InvalidTransitionError(CareSwapError):
    """Raised when a swap request that already reached a terminal state is reviewed again."""


class NotFoundError(CareSwapError):
    """Raised when a swap request id is unknown to the repository."""


# Mapping of custom exceptions to HTTP status codes
CUSTOM_ERRORS = {
    SwapValidationError: 422,
    DataAbsenceError: 404,
    NotFoundError: 404,
    DuplicateAssignmentError: 409,
    InvalidTransitionError: 409,
    SubmissionError: 502,
}


def status_code_for(error: CareSwapError) -> int:
    for error_type, status_code in CUSTOM_ERRORS.items():
        if isinstance(error, error_type):
            return status_code
    return 500
