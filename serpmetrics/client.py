"""
SERPmetrics API client.

Maps the API operations onto the signed, throttled dispatcher. Every
operation returns a ``concurrent.futures.Future`` resolving to the raw
``requests.Response``; response bodies are left for the caller to decode.
"""

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .constants import (
    DEFAULT_CHECK_LIMIT,
    DEFAULT_CONFIG,
    DEFAULT_FLUX_TYPE,
    PATH_FLUX_TREND,
    PATH_KEYWORDS_ADD,
    PATH_KEYWORDS_CHECK,
    PATH_KEYWORDS_DELETE,
    PATH_KEYWORDS_SERP,
    PATH_PRIORITY_ADD,
    PATH_PRIORITY_STATUS,
    PATH_USERS_CREDIT,
    VERSION
)
from .dispatcher import Callback, Dispatcher, RequestSpec
from .exceptions import ConfigurationError
from .signer import Credentials, Signer
from .throttle import Throttle
from .transport import RequestsTransport

logger = logging.getLogger(__name__)

Engines = Union[str, Sequence[str]]


def _engine_list(engines: Engines) -> List[str]:
    """Wrap a single engine string into a list."""
    if isinstance(engines, str):
        return [engines]
    return list(engines)


class SMClient:
    """
    Client for the SERPmetrics rank-tracking API.

    Requests are throttled per client: calls made faster than the rate limit
    are coalesced, so only the latest call made during a cooldown window is
    sent when the window closes. Earlier calls in that window have their
    futures cancelled. Failed requests are not retried.
    """

    VERSION = VERSION

    def __init__(self, credentials: Any, transport: Any = None, signer: Optional[Signer] = None,
                 executor: Optional[Executor] = None, clock: Optional[Callable[[], float]] = None,
                 timer_factory: Optional[Callable[..., Any]] = None, **config):
        """
        Initialize client.

        Args:
            credentials: Credentials, ``{'key': ..., 'secret': ...}`` or ``(key, secret)``
            transport: Object with ``send(request, done)``, a RequestsTransport by default
            signer: Signature generator, mainly for injecting a clock
            executor: Runs transport calls; the client owns and shuts down its
                own ThreadPoolExecutor when none is given
            clock: Monotonic clock for the throttle
            timer_factory: Timer factory for the throttle's deferred calls
            **config: Configuration options (base_url, user_agent, timeout, rate_limit)
        """
        self.credentials = Credentials.coerce(credentials)

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        self._validate_config()

        self.transport = transport or RequestsTransport()
        self.throttle = Throttle(
            self.min_interval_ms / 1000.0,
            clock=clock or time.monotonic,
            timer_factory=timer_factory or threading.Timer
        )
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(thread_name_prefix='serpmetrics')
        self.dispatcher = Dispatcher(
            self.credentials,
            self.config,
            self.transport,
            self.throttle,
            signer=signer,
            executor=self.executor
        )
        logger.debug("SERPmetrics client for %s, %.1fms between requests",
                     self.config['base_url'], self.min_interval_ms)

    def _validate_config(self):
        """Validate client configuration."""
        if self.credentials is None or not self.credentials.secret:
            raise ConfigurationError("secret cannot be empty")

        if self.config['rate_limit'] <= 0:
            raise ConfigurationError("rate_limit must be positive")

        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def min_interval_ms(self) -> float:
        return 1000.0 / self.config['rate_limit']

    def request(self, path: str, params: Optional[Dict[str, Any]] = None, method: str = 'POST',
                credentials: Any = None, callback: Optional[Callback] = None) -> Future:
        """Send a signed request to an arbitrary API path."""
        spec = RequestSpec(path=path, params=params or {}, method=method)
        return self.dispatcher.dispatch(spec, credentials=credentials, callback=callback)

    def add(self, keyword: str, engines: Engines, credentials: Any = None,
            callback: Optional[Callback] = None) -> Future:
        """
        Add a keyword to the queue.

        Engines are ``{engine}_{locale}`` strings, e.g. ``"google_en-us"``.
        Calling add() again for the same keyword replaces its engine list.
        """
        params = {'keyword': keyword, 'engines': _engine_list(engines)}
        return self.request(PATH_KEYWORDS_ADD, params, credentials=credentials, callback=callback)

    def remove(self, keyword_id: Union[str, Sequence[str]], credentials: Any = None,
               callback: Optional[Callback] = None) -> Future:
        """Remove a keyword entirely, including every engine assigned to it."""
        params = {'keyword_id': keyword_id}
        return self.request(PATH_KEYWORDS_DELETE, params, credentials=credentials, callback=callback)

    def priority_add(self, keyword: str, engines: Engines, credentials: Any = None,
                     callback: Optional[Callback] = None) -> Future:
        """Add a keyword to the priority queue, usage as per add()."""
        params = {'keyword': keyword, 'engines': _engine_list(engines)}
        return self.request(PATH_PRIORITY_ADD, params, credentials=credentials, callback=callback)

    def priority_status(self, priority_id: str, credentials: Any = None,
                        callback: Optional[Callback] = None) -> Future:
        params = {'priority_id': priority_id}
        return self.request(PATH_PRIORITY_STATUS, params, credentials=credentials, callback=callback)

    def check(self, keyword_id: str, engine: str, limit: int = DEFAULT_CHECK_LIMIT,
              credentials: Any = None, callback: Optional[Callback] = None) -> Future:
        """Get the last ``limit`` SERP check timestamps/ids for a keyword and engine."""
        params = {'keyword_id': keyword_id, 'engine': engine, 'limit': limit}
        return self.request(PATH_KEYWORDS_CHECK, params, method='GET',
                            credentials=credentials, callback=callback)

    def serp(self, check_id: str, domain: Optional[str] = None, credentials: Any = None,
             callback: Optional[Callback] = None) -> Future:
        """Get SERP data for a check, optionally restricted to a domain."""
        params = {'check_id': check_id}
        if domain is not None:
            params['domain'] = domain
        return self.request(PATH_KEYWORDS_SERP, params, credentials=credentials, callback=callback)

    def credit(self, credentials: Any = None, callback: Optional[Callback] = None) -> Future:
        """Get the current credit balance."""
        return self.request(PATH_USERS_CREDIT, credentials=credentials, callback=callback)

    def flux(self, engine_code: str, type: str = DEFAULT_FLUX_TYPE, credentials: Any = None,
             callback: Optional[Callback] = None) -> Future:
        """Get trended flux data for an engine code."""
        params = {'engine_code': engine_code, 'type': type}
        return self.request(PATH_FLUX_TREND, params, credentials=credentials, callback=callback)

    def close(self):
        """Drop any throttled request, wait for in-flight ones and close the transport."""
        self.throttle.cancel()
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        close = getattr(self.transport, 'close', None)
        if close is not None:
            close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def create_client(credentials: Any, rate_limit: Optional[float] = None,
                  timeout: Optional[int] = None, **config) -> SMClient:
    """
    Create a client.

    Args:
        credentials: API key and secret
        rate_limit: Requests per second, 30 by default
        timeout: Request timeout in milliseconds, 5000 by default
        **config: Other configuration options (base_url, user_agent)
    """
    if rate_limit is not None:
        config['rate_limit'] = rate_limit
    if timeout is not None:
        config['timeout'] = timeout
    return SMClient(credentials, **config)
