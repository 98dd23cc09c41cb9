"""
Redirect Resolver Tool

Purpose: Expand a (short) link by following its redirect chain one hop at a time
Inputs: URL, max redirects, per-hop timeout
Outputs: Final URL and number of hops taken
Dependencies: requests, urllib3, core/url_safety.py, core/hop_deadline.py

Features:
- Redirects followed manually so every hop is re-checked against the SSRF policy
- The host check runs on the URL exactly as requests will send it
- Absolute and relative Location headers
- Wall-clock deadline per hop; only status and headers are read, the body is never downloaded
- No retries: a single failed attempt aborts the whole resolution
"""

import os
import sys
from typing import Dict, Any, Iterable, Optional
from urllib.parse import urljoin, urlparse
import requests
from urllib3.util.retry import Retry

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from core.config import MAX_REDIRECTS, FETCH_TIMEOUT_SECONDS, BLOCKED_HOSTS, USER_AGENT
from core.hop_deadline import DeadlineAdapter, hop_deadline
from core.url_safety import check_url_safety, is_http_url
from models.clean_result import ErrorCode, ok_result, error_result


def create_session() -> requests.Session:
    """
    Create a requests session that never retries and never follows redirects.

    Its adapter lets hop_deadline() abort a request that outlives its timeout.

    Returns:
        Configured requests.Session object
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=0,
        read=False,
        redirect=False,
        raise_on_status=False
    )

    adapter = DeadlineAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9,ja;q=0.8',
    })

    return session


def prepare_request_url(url: str) -> str:
    """
    Re-serialize a URL the way requests will send it.

    requests/urllib3 split the authority differently from urllib.parse (a
    backslash ends it), so the host check has to run on this form.
    Raises requests.exceptions.RequestException if requests would refuse the URL.
    """
    prepared = requests.PreparedRequest()
    prepared.prepare_url(url, None)
    return prepared.url


def fetch_hop(session: requests.Session, url: str, timeout: float) -> Dict[str, Any]:
    """
    Issue one non-following GET and return its status code and Location header.

    The whole attempt runs under a wall-clock deadline of `timeout` seconds;
    a server that trickles its headers is cut off when it passes. The body is
    never read.

    Raises:
        requests.exceptions.RequestException on transport failure or deadline overrun
    """
    with hop_deadline(timeout) as deadline:
        response = session.get(url, allow_redirects=False, timeout=timeout, stream=True)
        try:
            hop = {
                'status_code': response.status_code,
                'location': response.headers.get('Location'),
            }
        finally:
            response.close()

    # A shut-down socket can end the header block early and still look like a response
    if deadline.expired:
        raise requests.exceptions.Timeout(f"Hop exceeded its {timeout:g}s deadline")

    return hop


def _parse_redirect_target(current_url: str, location: str):
    """Resolve a Location header against the current URL. Returns None if it does not parse."""
    try:
        target = urljoin(current_url, location.strip())
        parsed = urlparse(target)
        parsed.port
    except ValueError:
        return None

    # Non-http targets carry no host; check_url_safety rejects their scheme
    if is_http_url(parsed) and not parsed.hostname:
        return None

    return target, parsed


def resolve_redirects(
    url: str,
    max_redirects: int = MAX_REDIRECTS,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    blocked_hosts: Iterable[str] = BLOCKED_HOSTS,
    session: Optional[requests.Session] = None
) -> Dict[str, Any]:
    """
    Follow a redirect chain until a non-redirect response.

    Args:
        url: Starting URL (absolute http/https)
        max_redirects: Maximum number of redirects to follow (default: MAX_REDIRECTS)
        timeout: Per-hop request timeout in seconds (default: FETCH_TIMEOUT_SECONDS)
        blocked_hosts: Exact hostnames that must never be fetched
        session: Optional requests session (a fresh one is created and closed otherwise)

    Returns:
        Dict with:
            - success: bool
            - data: dict with 'final_url' and 'hops'
            - error: str or None
            - error_code: ErrorCode or None
    """
    owns_session = session is None
    if owns_session:
        session = create_session()

    try:
        current = url
        try:
            parsed = urlparse(current)
        except ValueError:
            return error_result(ErrorCode.invalid_input, 'Invalid URL.')
        hops = 0

        while True:
            # Checked before every fetch, including the first
            unsafe = check_url_safety(parsed, blocked_hosts, redirected=hops > 0)
            if unsafe:
                return unsafe

            try:
                request_url = prepare_request_url(current)
            except requests.exceptions.RequestException:
                if hops:
                    return error_result(ErrorCode.invalid_location, 'Invalid redirect URL.')
                return error_result(ErrorCode.invalid_input, 'Invalid URL.')

            # Again on the form requests sends: its host is the one actually contacted
            unsafe = check_url_safety(urlparse(request_url), blocked_hosts, redirected=hops > 0)
            if unsafe:
                return unsafe

            try:
                hop = fetch_hop(session, request_url, timeout)
            except requests.exceptions.RequestException:
                return error_result(ErrorCode.fetch_failed, 'Failed to fetch URL.')

            if not 300 <= hop['status_code'] < 400:
                return ok_result({
                    'final_url': request_url,
                    'hops': hops,
                })

            if hops >= max_redirects:
                return error_result(ErrorCode.too_many_redirects, 'Too many redirects.')

            location = hop['location']
            if not location:
                return error_result(ErrorCode.missing_location, 'Redirect without location header.')

            target = _parse_redirect_target(request_url, location)
            if target is None:
                return error_result(ErrorCode.invalid_location, 'Invalid redirect URL.')

            current, parsed = target
            hops += 1

    finally:
        if owns_session:
            session.close()


if __name__ == '__main__':
    test_urls = [
        'https://amzn.to/3xYzAbC',
        'https://www.amazon.com/dp/B08N5WRWNW',
        'http://localhost:8080/',
    ]

    print("Redirect Resolver Test Cases:")
    print("=" * 60)

    for test_url in test_urls:
        print(f"\nResolving: {test_url}")
        result = resolve_redirects(test_url)

        print(f"Success: {result['success']}")
        if result['success']:
            print(f"Final URL: {result['data']['final_url']}")
            print(f"Hops: {result['data']['hops']}")
        else:
            print(f"Error [{result['error_code'].value}]: {result['error']}")
