"""Exceptions raised by the signing client.

Every failure surfaces to the caller as a subclass of TurnkeyError:
- ConfigurationError: missing or invalid caller-supplied setup
- ApiError: non-2xx responses, missing result payloads, poll timeouts
- ActivityFailedError: the service reported the activity as failed
- DecodeError: malformed hex, integers, UTF-8 or JSON in a response
- SignatureError: recovery indicator or r/s values that cannot be accepted
"""

from typing import Optional


class TurnkeyError(Exception):
    """Base exception for signing client failures."""
    pass


class ConfigurationError(TurnkeyError):
    """Exception raised for missing or invalid configuration."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")
        self.message = message


class MissingParameterError(ConfigurationError):
    """Exception raised when a required request parameter is absent."""
    pass


class ApiError(TurnkeyError):
    """Exception raised for errors reported through the HTTP API.

    Attributes:
        code: Short machine tag (HTTP_ERROR, TIMEOUT, MISSING_RESULT)
        message: Human-readable text, possibly the raw response body
        status_code: HTTP status code when the error came from a response
    """

    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    MISSING_RESULT = "MISSING_RESULT"

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"API error [{code}]: {message}")
        self.code = code
        self.message = message
        self.status_code = status_code


class ActivityFailedError(TurnkeyError):
    """Exception raised when the service marks an activity as failed."""

    def __init__(self, message: str):
        super().__init__(f"Activity failed: {message}")
        self.message = message


class DecodeError(TurnkeyError):
    """Exception raised when a response cannot be decoded."""
    pass


class SignatureError(TurnkeyError):
    """Exception raised when returned signature components are invalid."""
    pass
