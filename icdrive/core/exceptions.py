"""
Custom exceptions for iCloud session and drive operations.

Every failure surfaced by the core derives from IcloudError so callers
can decide on the next step (re-prompt for credentials, re-prompt for a
2FA code, abort) from the exception type alone.
"""
from typing import Optional


class IcloudError(Exception):
    """Base exception for all iCloud-related errors."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code of the response (if available)
        """
        self.status = status
        super().__init__(message)


class TransportError(IcloudError):
    """Raised when the HTTP library fails to deliver a request."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class DecodingError(IcloudError):
    """Raised for malformed header values, JSON bodies, timestamps or node fields."""
    pass


class MissingCacheItem(IcloudError):
    """
    Raised when a field that only a prior step can populate is absent.

    Signals "log in again", not a bug.
    """

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing session field: {field}")


class InvalidCredentials(IcloudError):
    """Raised when the sign-in endpoint rejects the account name or password."""

    def __init__(self, message: str = "Invalid credentials.", status: Optional[int] = None) -> None:
        super().__init__(message, status)


class NeedsSecondFactor(IcloudError):
    """Raised when a second-factor code is required but none can be supplied."""

    def __init__(self, message: str = "Needs 2FA.") -> None:
        super().__init__(message)


class AuthenticationFailed(IcloudError):
    """Raised for an explicit 401, a rejected 2FA code or an expired drive session."""

    def __init__(self, message: str = "Authentication failed.", status: Optional[int] = None) -> None:
        super().__init__(message, status)


class TrustFailed(IcloudError):
    """Raised when the device-trust request is not acknowledged."""

    def __init__(self, message: str = "Trust failed.", status: Optional[int] = None) -> None:
        super().__init__(message, status)


class InvalidNodeType(IcloudError):
    """Raised for an unrecognised or unexpected drive node kind."""

    def __init__(self, node_type: object = None, message: Optional[str] = None) -> None:
        self.node_type = node_type
        super().__init__(message or f"Invalid drive node type: {node_type!r}")
