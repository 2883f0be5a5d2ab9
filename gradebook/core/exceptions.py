from typing import Any, Dict, Optional


class GradebookError(Exception):
    """Base class for errors the API renders with its own error code."""
    code = "GRADEBOOK_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AlreadyCompletedError(GradebookError):
    """
    Raised when a locked submission is submitted again.

    Carries the stored result so callers can show it instead of failing.
    """
    code = "ALREADY_COMPLETED"
    status_code = 409

    def __init__(self, previous_result: Dict[str, Any], message: str = "You have already completed this exam"):
        super().__init__(message, details={"previous_result": previous_result})
        self.previous_result = previous_result
