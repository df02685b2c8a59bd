"""
SERPmetrics client library

A Python client for the SERPmetrics keyword rank-tracking API. Requests are
signed with a timestamped HMAC-SHA256 and throttled to the configured rate.

Example usage:
    from serpmetrics import create_client

    client = create_client({'key': 'your-key', 'secret': 'your-secret'})
    response = client.credit().result()
    print(response.json())
"""

from .client import SMClient, create_client
from .dispatcher import Dispatcher, RequestSpec
from .exceptions import (
    SMClientError,
    ConfigurationError,
    RequestTimeoutError,
    TransportError
)
from .signer import Credentials, SignatureToken, Signer
from .throttle import Throttle, ThrottleState
from .transport import OutboundRequest, RequestsTransport
from .constants import (
    API_URL,
    DEFAULT_CONFIG,
    USER_AGENT,
    VERSION
)

__version__ = "1.0.0"
__all__ = [
    "SMClient",
    "create_client",
    "Dispatcher",
    "RequestSpec",
    "SMClientError",
    "ConfigurationError",
    "RequestTimeoutError",
    "TransportError",
    "Credentials",
    "SignatureToken",
    "Signer",
    "Throttle",
    "ThrottleState",
    "OutboundRequest",
    "RequestsTransport",
    "API_URL",
    "DEFAULT_CONFIG",
    "USER_AGENT",
    "VERSION"
]
