"""
Signed, throttled request dispatch.

The dispatcher turns a RequestSpec into an OutboundRequest, signs it at the
moment it is sent and hands it to the transport. Results are delivered
through a ``concurrent.futures.Future`` and an optional callback.
"""

import json
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urljoin

from .constants import (
    DEFAULT_REQUEST,
    FIELD_AUTH,
    FIELD_KEY,
    FIELD_PARAMS,
    FIELD_TIMESTAMP,
    VERSION
)
from .exceptions import ConfigurationError, RequestTimeoutError
from .signer import Credentials, Signer
from .throttle import Throttle
from .transport import OutboundRequest

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]


@dataclass
class RequestSpec:
    path: str = DEFAULT_REQUEST['path']
    params: Dict[str, Any] = field(default_factory=dict)
    method: str = DEFAULT_REQUEST['method']

    @classmethod
    def from_options(cls, options: Union["RequestSpec", Mapping[str, Any]]) -> "RequestSpec":
        """
        Merge options over the request defaults.

        The API only takes GET and POST; any other method is sent as POST.
        """
        if isinstance(options, RequestSpec):
            options = vars(options)
        merged = {**DEFAULT_REQUEST, **{k: v for k, v in options.items() if v is not None}}
        method = 'GET' if merged['method'].upper() == 'GET' else 'POST'
        return cls(
            path=merged['path'],
            params=dict(merged.get('params') or {}),
            method=method
        )


class _Completion:
    """Settles a future at most once."""

    def __init__(self, future: Future):
        self.future = future
        self._lock = threading.Lock()

    def __call__(self, error: Optional[BaseException], response: Any) -> bool:
        with self._lock:
            if self.future.done():
                return False
            if error is not None:
                self.future.set_exception(error)
            else:
                self.future.set_result(response)
            return True


def _notify(callback: Callback, future: Future):
    if future.cancelled():
        return
    error = future.exception()
    callback(error, None if error is not None else future.result())


class Dispatcher:
    """
    Builds, signs, throttles and sends API requests.

    Transport calls run on ``executor`` so dispatch never waits on the
    network; the watchdog is armed when the throttle fires the request.

    Args:
        credentials: Default credentials for requests without an override
        config: Client configuration (base_url, user_agent, timeout)
        transport: Object with ``send(request, done)``
        throttle: Throttle shared by every request of the client
        signer: Signature token generator
        timer_factory: Used for the per-request timeout watchdog
        executor: Runs transport calls, a ThreadPoolExecutor by default
    """

    def __init__(self, credentials: Credentials, config: Dict[str, Any], transport: Any,
                 throttle: Throttle, signer: Optional[Signer] = None,
                 timer_factory: Callable[..., Any] = threading.Timer,
                 executor: Optional[Executor] = None):
        self.credentials = credentials
        self.config = config
        self.transport = transport
        self.throttle = throttle
        self.signer = signer or Signer()
        self.timer_factory = timer_factory
        self.executor = executor or ThreadPoolExecutor(thread_name_prefix='serpmetrics')

    def resolve_credentials(self, override: Any = None) -> Credentials:
        """
        Pick the credentials for a request.

        A None or empty override falls back to the client's credentials.

        Raises:
            ConfigurationError: If the chosen credentials have no secret
        """
        credentials = Credentials.coerce(override) or self.credentials
        if credentials is None or not credentials.secret:
            raise ConfigurationError("secret cannot be empty")
        return credentials

    def build_request(self, spec: RequestSpec, credentials: Credentials) -> OutboundRequest:
        """Sign and shape a request for the transport."""
        token = self.signer.sign(credentials)
        payload = {
            FIELD_KEY: credentials.key,
            FIELD_AUTH: token.signature,
            FIELD_TIMESTAMP: token.timestamp,
            FIELD_PARAMS: spec.params
        }
        url = urljoin(self.config['base_url'].rstrip('/') + '/', spec.path.lstrip('/'))

        if spec.method == 'GET':
            # nested params travel as a single JSON-encoded query field
            query = dict(payload)
            query[FIELD_PARAMS] = json.dumps(spec.params, separators=(',', ':'))
            return OutboundRequest(
                method='GET',
                url=url,
                query=query,
                timeout_ms=self.config['timeout']
            )

        return OutboundRequest(
            method='POST',
            url=url,
            headers={'User-Agent': f"{self.config['user_agent']} {VERSION}"},
            body=payload,
            timeout_ms=self.config['timeout']
        )

    def dispatch(self, spec: Union[RequestSpec, Mapping[str, Any]], credentials: Any = None,
                 callback: Optional[Callback] = None) -> Future:
        """
        Send a request through the throttle.

        Args:
            spec: RequestSpec or mapping with path, params and method
            credentials: Optional per-request credentials override
            callback: Called once with ``(error, response)`` on completion

        Returns:
            Future resolving to the transport's raw response. The future is
            cancelled if the throttle coalesces the request away.

        Raises:
            ConfigurationError: If no usable secret is available
        """
        spec = RequestSpec.from_options(spec)
        credentials = self.resolve_credentials(credentials)

        future = Future()
        if callback is not None:
            future.add_done_callback(partial(_notify, callback))

        fired = self.throttle.submit(
            partial(self._fire, spec, credentials, future),
            on_drop=future.cancel
        )
        if not fired:
            logger.debug("Throttled %s %s", spec.method, spec.path)
        return future

    def _fire(self, spec: RequestSpec, credentials: Credentials, future: Future):
        """Arm the watchdog and hand the request to the executor."""
        if not future.set_running_or_notify_cancel():
            logger.debug("Skipping cancelled request %s %s", spec.method, spec.path)
            return

        completion = _Completion(future)
        timeout_ms = self.config['timeout']
        watchdog = self.timer_factory(
            timeout_ms / 1000.0,
            partial(completion, RequestTimeoutError(f"Request timed out after {timeout_ms}ms"), None)
        )
        watchdog.start()
        try:
            self.executor.submit(self._send, spec, credentials, completion, watchdog)
        except RuntimeError as e:
            # executor already shut down
            watchdog.cancel()
            completion(e, None)

    def _send(self, spec: RequestSpec, credentials: Credentials, completion: _Completion,
              watchdog: Any):
        def done(error, response):
            watchdog.cancel()
            if not completion(error, response):
                logger.debug("Discarding late completion for %s %s", spec.method, spec.path)

        try:
            request = self.build_request(spec, credentials)
        except Exception as e:
            done(e, None)
            return

        logger.debug("Dispatching %s %s", request.method, request.url)
        try:
            self.transport.send(request, done)
        except Exception as e:
            done(e, None)
