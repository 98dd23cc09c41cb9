"""
Amazon URL Cleaner Tool

Purpose: Rewrite an Amazon product/search URL into a canonical, tracking-free form
Inputs: Final (already expanded) URL
Outputs: Cleaned URL, ASIN (if any), removed tracking parameters
Dependencies: re, urllib, core/config.py

Cleaning Strategy:
1. Reject hosts that are not Amazon marketplaces
2. Extract the ASIN from /dp/<ASIN> or /gp/product/<ASIN>
3. ASIN found: the URL collapses to https://<host>/dp/<ASIN>
4. No ASIN: drop only known tracking parameters, since other query
   parameters may drive the page (search terms, filters, ...)
"""

import re
from typing import Dict, Any, Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from core.config import AMAZON_HOST_SUFFIXES, REMOVE_PARAMS, REMOVE_PARAM_PREFIXES
from core.url_safety import is_amazon_host
from models.clean_result import ErrorCode, ok_result, error_result


# Tried in order; the first match wins
ASIN_PATTERNS = [
    re.compile(r'/dp/([A-Z0-9]{10})(?:[/?]|$)', re.IGNORECASE),
    re.compile(r'/gp/product/([A-Z0-9]{10})(?:[/?]|$)', re.IGNORECASE),
]

DEFAULT_PORTS = {'http': 80, 'https': 443}


def extract_asin(path: str) -> Optional[str]:
    """
    Extract an ASIN from a URL path.

    Args:
        path: URL path (e.g. '/Some-Product/dp/b000000000/ref=sr_1_1')

    Returns:
        Upper-cased ASIN, or None
    """
    for pattern in ASIN_PATTERNS:
        match = pattern.search(path)
        if match:
            return match.group(1).upper()
    return None


def is_tracking_param(
    key: str,
    remove_params: Iterable[str] = REMOVE_PARAMS,
    remove_prefixes: Iterable[str] = REMOVE_PARAM_PREFIXES,
) -> bool:
    return key in remove_params or any(key.startswith(prefix) for prefix in remove_prefixes)


def clean_amazon_url(
    expanded_url: str,
    host_suffixes: Iterable[str] = AMAZON_HOST_SUFFIXES,
    remove_params: Iterable[str] = REMOVE_PARAMS,
    remove_prefixes: Iterable[str] = REMOVE_PARAM_PREFIXES,
) -> Dict[str, Any]:
    """
    Clean an Amazon URL.

    When an ASIN is found every query parameter disappears from the cleaned
    URL, but only the tracking ones are listed in removed_params.

    Args:
        expanded_url: URL at the end of the redirect chain
        host_suffixes: Allowed Amazon marketplace domains
        remove_params: Exact query keys treated as tracking
        remove_prefixes: Query key prefixes treated as tracking

    Returns:
        Dict with:
            - success: bool
            - data: dict with 'cleaned_url', 'asin', 'removed_params'
            - error: str or None
            - error_code: ErrorCode or None
    """
    try:
        parts = urlsplit(expanded_url)
        port = parts.port
    except ValueError:
        return error_result(ErrorCode.invalid_input, 'Invalid URL.')

    if not is_amazon_host(parts.hostname, host_suffixes):
        return error_result(ErrorCode.unsupported_vendor, 'Final URL is not an Amazon domain.')

    asin = extract_asin(parts.path)

    query_pairs = parse_qsl(parts.query, keep_blank_values=True)
    removed_params: List[Dict[str, str]] = []
    kept_pairs = []
    for key, value in query_pairs:
        if is_tracking_param(key, remove_params, remove_prefixes):
            removed_params.append({'key': key, 'value': value})
        else:
            kept_pairs.append((key, value))

    if asin:
        host = parts.hostname.lower()
        # Default ports are dropped; an explicit :80 would break the https URL
        if port and DEFAULT_PORTS.get(parts.scheme.lower()) != port:
            host = f"{host}:{port}"
        cleaned_url = f"https://{host}/dp/{asin}"
    else:
        # Leave the query string untouched unless something was removed
        query = urlencode(kept_pairs) if removed_params else parts.query
        cleaned_url = urlunsplit((parts.scheme, parts.netloc, parts.path, query, ''))

    return ok_result({
        'cleaned_url': cleaned_url,
        'asin': asin,
        'removed_params': removed_params,
    })


if __name__ == '__main__':
    test_urls = [
        'https://www.amazon.com/gp/product/B000000000?tag=abc&ref=xyz',
        'https://www.amazon.co.jp/Some-Item/dp/b08n5wrwnw/ref=sr_1_1?crid=1&keywords=shoes&pd_rd_w=x',
        'https://www.amazon.co.jp/some/page?keywords=shoes&utm_custom=1#reviews',
        'https://example.com/product/1',
    ]

    print("Amazon URL Cleaner Test Cases:")
    print("=" * 60)

    for test_url in test_urls:
        result = clean_amazon_url(test_url)
        print(f"\nInput: {test_url}")
        print(f"Success: {result['success']}")
        if result['success']:
            data = result['data']
            print(f"Cleaned: {data['cleaned_url']}")
            print(f"ASIN: {data['asin'] or '-'}")
            print(f"Removed: {', '.join(p['key'] for p in data['removed_params']) or '-'}")
        else:
            print(f"Error [{result['error_code'].value}]: {result['error']}")
