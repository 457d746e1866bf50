from typing import Dict, Optional


class VidSentryException(Exception):
    """Base exception for the vidsentry service."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationException(VidSentryException):
    """Raised when configuration is invalid."""
    pass


class ProviderException(VidSentryException):
    """Raised when the remote inference provider fails."""
    pass


class InvalidInputException(VidSentryException):
    """Raised when an upload or chat request is missing or malformed."""
    pass


class RemoteSubmissionException(VidSentryException):
    """Raised when the remote service rejects the uploaded file."""
    pass


class ProcessingTimeoutOrFailureException(VidSentryException):
    """
    Raised when remote processing did not reach ACTIVE.

    Covers both an explicit remote failure and an exhausted poll ceiling;
    ``details`` keeps the last observed remote state and the attempt count.
    """

    def __init__(self, message: str, state: Optional[str] = None, attempts: int = 0):
        super().__init__(
            message,
            error_code="PROCESSING_TIMEOUT_OR_FAILURE",
            details={"state": state, "attempts": attempts},
        )
        self.state = state
        self.attempts = attempts


class InferenceException(VidSentryException):
    """Raised when the content-analysis call fails."""
    pass


class CleanupException(VidSentryException):
    """Raised internally when a temporary file cannot be removed. Never surfaced."""
    pass
