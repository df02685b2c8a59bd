"""
HTTP transport backed by requests.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from .exceptions import RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class OutboundRequest:
    """Fully shaped request handed to a transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    query: Optional[Dict[str, Any]] = None
    body: Optional[Dict[str, Any]] = None
    timeout_ms: int = 5000


class RequestsTransport:
    """
    Performs requests with a ``requests.Session``.

    ``send`` reports completion through ``done(error, response)``; the raw
    ``requests.Response`` is passed through without status checks or parsing.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def send(self, request: OutboundRequest, done: Callable[[Optional[Exception], Any], None]):
        kwargs = {
            'headers': request.headers,
            'timeout': request.timeout_ms / 1000.0,
        }
        if request.query is not None:
            kwargs['params'] = request.query
        if request.body is not None:
            kwargs['json'] = request.body

        try:
            response = self.session.request(request.method, request.url, **kwargs)
        except requests.Timeout as e:
            error = RequestTimeoutError(f"Request timed out after {request.timeout_ms}ms: {e}")
            error.__cause__ = e
            done(error, None)
            return
        except requests.RequestException as e:
            error = TransportError(f"HTTP request failed: {e}")
            error.__cause__ = e
            done(error, None)
            return

        logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
        done(None, response)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()
