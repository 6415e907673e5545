"""
Custom exceptions for the Imbo client library.
"""


class ImboClientError(Exception):
    """Base exception for Imbo client errors."""
    pass


class InvalidArgumentError(ImboClientError, ValueError):
    """Raised when a transformation or call receives malformed input."""
    pass


class InvalidConfigurationError(ImboClientError):
    """Raised when client or URL configuration is invalid."""
    pass


class ResourceExistsError(ImboClientError):
    """Raised when creating a resource that already exists."""
    pass


class HTTPError(ImboClientError):
    """Raised when an HTTP request fails or the server rejects it."""

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
