"""
Custom exceptions for the SERPmetrics client library.
"""


class SMClientError(Exception):
    """Base exception for SERPmetrics client errors."""
    pass


class ConfigurationError(SMClientError):
    """Raised when client configuration or credentials are invalid."""
    pass


class RequestTimeoutError(SMClientError, TimeoutError):
    """Raised when a request does not complete within the configured timeout."""
    pass


class TransportError(SMClientError):
    """Raised when the HTTP request fails at the network level."""
    pass
