"""
URL Safety Checks

Purpose: Shared scheme / host validation used on every URL the cleaner touches
Inputs: Parsed URL or hostname
Outputs: bool, or a failure result dict
Dependencies: urllib, core/config.py

The resolver runs these on the initial URL and again on every redirect target,
so a chain cannot pivot onto a loopback address after its first hop.
"""

import os
import sys
from typing import Dict, Any, Iterable, Optional
from urllib.parse import ParseResult

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from core.config import (
    ALLOWED_SCHEMES,
    BLOCKED_HOSTS,
    BLOCKED_HOST_SUFFIXES,
    BLOCKED_HOST_PREFIXES,
    AMAZON_HOST_SUFFIXES,
)
from models.clean_result import ErrorCode, error_result


def _normalize_host(hostname: Optional[str]) -> str:
    host = (hostname or '').strip().lower()
    # "localhost." resolves the same as "localhost"
    if host.endswith('.'):
        host = host[:-1]
    return host


def is_http_url(parsed: ParseResult) -> bool:
    return parsed.scheme.lower() in ALLOWED_SCHEMES


def is_blocked_host(
    hostname: Optional[str],
    blocked_hosts: Iterable[str] = BLOCKED_HOSTS,
    blocked_suffixes: Iterable[str] = BLOCKED_HOST_SUFFIXES,
    blocked_prefixes: Iterable[str] = BLOCKED_HOST_PREFIXES,
) -> bool:
    """
    Check a hostname against the SSRF block policy.

    Args:
        hostname: Hostname as returned by urlparse().hostname (IPv6 without brackets)
        blocked_hosts: Exact hostnames to reject
        blocked_suffixes: Hostname suffixes to reject (e.g. '.localhost')
        blocked_prefixes: Hostname prefixes to reject (e.g. '127.')

    Returns:
        True if the host must not be fetched
    """
    host = _normalize_host(hostname)
    if host in blocked_hosts:
        return True
    if any(host.endswith(suffix) for suffix in blocked_suffixes):
        return True
    if any(host.startswith(prefix) for prefix in blocked_prefixes):
        return True
    return False


def is_amazon_host(hostname: Optional[str], host_suffixes: Iterable[str] = AMAZON_HOST_SUFFIXES) -> bool:
    """True if hostname equals an allowed suffix or is a subdomain of one."""
    host = _normalize_host(hostname)
    if not host:
        return False
    return any(host == suffix or host.endswith('.' + suffix) for suffix in host_suffixes)


def check_url_safety(
    parsed: ParseResult,
    blocked_hosts: Iterable[str] = BLOCKED_HOSTS,
    redirected: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Run scheme and host checks on a parsed URL.

    Args:
        parsed: urlparse() result
        blocked_hosts: Exact hostnames to reject
        redirected: True when checking a redirect target (changes the error message)

    Returns:
        None if the URL may be fetched, otherwise a failure result dict
    """
    if not is_http_url(parsed):
        message = 'Redirected to unsupported scheme.' if redirected else 'URL scheme must be http or https.'
        return error_result(ErrorCode.unsupported_scheme, message)

    if is_blocked_host(parsed.hostname, blocked_hosts):
        message = 'Redirected to blocked hostname.' if redirected else 'Blocked hostname.'
        return error_result(ErrorCode.blocked_host, message)

    return None
