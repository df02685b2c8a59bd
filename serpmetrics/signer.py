"""
Request signing for the SERPmetrics API.

Every request carries a Unix timestamp (in seconds) and a base64-encoded
HMAC-SHA256 of that timestamp keyed by the account secret. The server
rejects timestamps outside its skew window, so tokens are never reused.
"""

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, NamedTuple, Optional

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class Credentials:
    """API key and secret pair."""
    key: str
    secret: str

    @classmethod
    def coerce(cls, value: Any) -> Optional["Credentials"]:
        """
        Build credentials from a Credentials, a mapping or a (key, secret) pair.

        Returns None for None or an empty value.

        Raises:
            ConfigurationError: If the value cannot be interpreted as credentials
        """
        if isinstance(value, Credentials):
            return value
        if not value:
            return None
        if isinstance(value, Mapping):
            return cls(key=value.get('key', ''), secret=value.get('secret', ''))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(key=value[0], secret=value[1])
        raise ConfigurationError(f"Unsupported credentials value: {type(value).__name__}")

    def __repr__(self):
        return f"Credentials(key={self.key!r}, secret='***')"


class SignatureToken(NamedTuple):
    timestamp: int
    signature: str


class Signer:
    """
    Generates per-request signature tokens.

    The clock returns Unix time in seconds and is injectable so tokens can be
    checked against fixed timestamps.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    @staticmethod
    def signature_for(secret: str, timestamp: int) -> str:
        """
        Compute the base64 HMAC-SHA256 of the decimal timestamp.

        Args:
            secret: Account secret used as the HMAC key
            timestamp: Unix timestamp in seconds

        Returns:
            Base64-encoded signature
        """
        mac = hmac.new(
            secret.encode('utf-8'),
            str(timestamp).encode('utf-8'),
            hashlib.sha256
        )
        return base64.b64encode(mac.digest()).decode('ascii')

    def sign(self, credentials: Credentials) -> SignatureToken:
        """
        Generate a fresh signature token.

        Args:
            credentials: Credentials holding the secret to sign with

        Returns:
            SignatureToken with the timestamp and its signature

        Raises:
            ConfigurationError: If the secret is missing or empty
        """
        if credentials is None or not credentials.secret:
            raise ConfigurationError("secret cannot be empty")

        timestamp = int(self.clock())
        return SignatureToken(timestamp, self.signature_for(credentials.secret, timestamp))
