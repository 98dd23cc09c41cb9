"""
Hop Deadline

Purpose: Put a wall-clock limit on a single HTTP attempt
Inputs: Timeout in seconds
Outputs: DeadlineAdapter (mounted on the resolver session), hop_deadline() context
Dependencies: requests, urllib3, threading

requests' `timeout=` only bounds each socket operation, so a server that
trickles header lines can keep one request alive indefinitely. Connections
created through DeadlineAdapter register themselves with the active deadline
while they wait for the response; when the deadline passes, a watchdog
thread shuts their socket down, which makes the blocked read return at once.
"""

import socket
import threading
from contextlib import contextmanager

from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool


_active = threading.local()


class HopDeadline:
    """Watchdog for one attempt. Connections are aborted once the deadline fires."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.expired = False
        self._connections = []
        self._lock = threading.Lock()
        self._timer = threading.Timer(timeout, self._fire)
        self._timer.daemon = True

    def start(self):
        self._timer.start()

    def cancel(self):
        self._timer.cancel()

    def watch(self, conn):
        with self._lock:
            if self.expired:
                _abort(conn)
            else:
                self._connections.append(conn)

    def _fire(self):
        with self._lock:
            self.expired = True
            for conn in self._connections:
                _abort(conn)


def _abort(conn):
    sock = getattr(conn, 'sock', None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the other side
        pass


@contextmanager
def hop_deadline(timeout: float):
    """Run the enclosed request under a wall-clock deadline (current thread only)."""
    deadline = HopDeadline(timeout)
    previous = getattr(_active, 'deadline', None)
    _active.deadline = deadline
    deadline.start()
    try:
        yield deadline
    finally:
        deadline.cancel()
        _active.deadline = previous


def _register(conn):
    deadline = getattr(_active, 'deadline', None)
    if deadline is not None:
        deadline.watch(conn)


class _WatchedHTTPConnection(HTTPConnection):
    def getresponse(self, *args, **kwargs):
        _register(self)
        return super().getresponse(*args, **kwargs)


class _WatchedHTTPSConnection(HTTPSConnection):
    def getresponse(self, *args, **kwargs):
        _register(self)
        return super().getresponse(*args, **kwargs)


class _WatchedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _WatchedHTTPConnection


class _WatchedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _WatchedHTTPSConnection


class DeadlineAdapter(HTTPAdapter):
    """HTTPAdapter whose connections can be aborted by hop_deadline()."""

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            'http': _WatchedHTTPConnectionPool,
            'https': _WatchedHTTPSConnectionPool,
        }
