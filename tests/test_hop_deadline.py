import socket
import threading
import time
from unittest.mock import MagicMock

import pytest
import requests

from core.hop_deadline import HopDeadline, hop_deadline
from core.redirect_resolver import create_session, fetch_hop


@pytest.fixture
def raw_server():
    """Start a one-shot TCP server on 127.0.0.1 that hands the accepted socket to `handler`."""
    stop = threading.Event()
    listeners = []

    def start(handler):
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listener.settimeout(5)
        listeners.append(listener)

        def serve():
            try:
                conn, _ = listener.accept()
            except OSError:
                return
            with conn:
                try:
                    conn.recv(65536)
                    handler(conn, stop)
                except OSError:
                    # client went away
                    pass

        threading.Thread(target=serve, daemon=True).start()
        return f"http://127.0.0.1:{listener.getsockname()[1]}/"

    yield start

    stop.set()
    for listener in listeners:
        listener.close()


def _trickle_headers(conn, stop):
    conn.sendall(b"HTTP/1.1 200 OK\r\n")
    for i in range(40):
        if stop.wait(0.25):
            return
        conn.sendall(f"X-Slow-{i}: 1\r\n".encode())


def _redirect(conn, stop):
    conn.sendall(
        b"HTTP/1.1 302 Found\r\n"
        b"Location: https://www.amazon.com/dp/B000000000\r\n"
        b"Content-Length: 0\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


def test_trickled_headers_hit_the_deadline(raw_server):
    url = raw_server(_trickle_headers)
    session = create_session()
    started = time.monotonic()
    try:
        with pytest.raises(requests.exceptions.RequestException):
            fetch_hop(session, url, timeout=1)
    finally:
        session.close()
    # every header line arrives well inside the socket timeout; only the deadline stops it
    assert time.monotonic() - started < 2.5


def test_fast_response_is_returned(raw_server):
    url = raw_server(_redirect)
    session = create_session()
    try:
        hop = fetch_hop(session, url, timeout=2)
    finally:
        session.close()
    assert hop == {'status_code': 302, 'location': "https://www.amazon.com/dp/B000000000"}


def test_slow_plain_session_is_reported_as_timeout():
    response = MagicMock(status_code=200, headers={})

    def slow_get(*args, **kwargs):
        time.sleep(0.3)
        return response

    session = MagicMock()
    session.get.side_effect = slow_get
    with pytest.raises(requests.exceptions.Timeout):
        fetch_hop(session, "https://www.amazon.com/", timeout=0.1)
    response.close.assert_called_once()


def test_connection_watched_after_expiry_is_aborted():
    deadline = HopDeadline(5)
    deadline._fire()
    conn = MagicMock()
    deadline.watch(conn)
    conn.sock.shutdown.assert_called_once_with(socket.SHUT_RDWR)


def test_deadline_context_is_cancelled_on_exit():
    with hop_deadline(0.05) as deadline:
        pass
    time.sleep(0.1)
    assert not deadline.expired
