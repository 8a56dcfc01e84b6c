"""Exceptions raised by FitPass services."""
from typing import Optional


class FitPassError(Exception):
    """Base class for all FitPass errors."""


class SanityError(FitPassError):
    """Raised when the Sanity content API rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ClerkError(FitPassError):
    """Raised when the Clerk backend API fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(FitPassError):
    """Raised when a session token cannot be verified."""


class ToolNotFoundError(FitPassError):
    """Raised when the assistant asks for a tool that is not registered."""


class ToolInputError(FitPassError):
    """Raised when tool arguments fail input schema validation."""
