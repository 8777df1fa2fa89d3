"""
Exception types raised by the Orchis console.
"""
from typing import Any, Optional


class OrchisError(Exception):
    """Base class for errors raised by this package."""


class CallableFunctionError(OrchisError):
    """A callable Cloud Function returned an error or could not be reached."""

    def __init__(self, function: str, message: str, status: Optional[str] = None, details: Any = None):
        super().__init__(f"{function}: {message}")
        self.function = function
        self.message = message
        self.status = status
        self.details = details


class StorageError(OrchisError):
    """Object storage upload or lookup failed."""


class UnsplashError(OrchisError):
    """The photo API responded with an error."""

    def __init__(self, status_code: int, message: str = ""):
        super().__init__(f"Unsplash API error: {status_code} {message}".strip())
        self.status_code = status_code


class AdminAuthError(OrchisError):
    """The presented credential does not grant admin access."""


class CheckoutError(OrchisError):
    """A featured-listing checkout session could not be created."""


class SubmissionError(OrchisError):
    """A tool submission failed validation."""
