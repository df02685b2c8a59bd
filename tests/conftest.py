"""
Shared fixtures: a controllable clock, manual timers and a recording transport.
"""

import threading
from concurrent.futures import Executor, Future
from unittest.mock import Mock

import pytest

from serpmetrics import Credentials


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTimer:
    """threading.Timer stand-in fired by hand."""

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.fn()


class FakeTimerFactory:
    """Builds FakeTimers and keeps them for inspection."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, fn):
        timer = FakeTimer(delay, fn)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if t.started and not t.cancelled]


class RecordingTransport:
    """
    Transport that records every request with the clock time it was sent.

    With ``hold=True`` completions are kept in ``pending`` and must be
    delivered by the test.
    """

    def __init__(self, clock=None, hold=False):
        self.clock = clock
        self.hold = hold
        self.sent = []
        self.pending = []
        self.closed = False

    def send(self, request, done):
        self.sent.append((self.clock() if self.clock else None, request))
        if self.hold:
            self.pending.append(done)
        else:
            done(None, Mock(status_code=200, request=request))

    @property
    def requests(self):
        return [request for _, request in self.sent]

    def close(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def transport(clock):
    return RecordingTransport(clock)


@pytest.fixture
def credentials():
    return Credentials("test-key", "test-secret")


class InlineExecutor(Executor):
    """Executor running submitted calls on the submitting thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class BlockingTransport:
    """Transport that stalls until released or ``delay`` seconds pass."""

    def __init__(self, delay):
        self.delay = delay
        self.release = threading.Event()

    def send(self, request, done):
        self.release.wait(self.delay)
        done(None, Mock(status_code=200, request=request))

    def close(self):
        self.release.set()


@pytest.fixture
def executor():
    return InlineExecutor()
