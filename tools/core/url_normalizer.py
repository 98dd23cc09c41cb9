"""
URL Normalizer Tool

Purpose: Validate the candidate URL a user submits before any network activity
Inputs: Raw URL string
Outputs: Validated URL or error
Dependencies: urllib, validators
"""

import os
import sys
from urllib.parse import urlparse
from typing import Dict, Any, Optional
import validators

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from core.url_safety import is_http_url
from models.clean_result import ErrorCode, ok_result, error_result


def normalize_url(raw_url: Optional[str]) -> Dict[str, Any]:
    """
    Validate a candidate URL.

    Unlike a browser address bar, no scheme is assumed: the input must be an
    absolute http(s) URL.

    Args:
        raw_url: Raw URL string from user input

    Returns:
        Dict with:
            - success: bool
            - data: dict with 'url', 'original', 'domain', 'scheme'
            - error: str or None
            - error_code: ErrorCode or None
    """
    if raw_url is None or not raw_url.strip():
        return error_result(ErrorCode.invalid_input, 'Missing url parameter.')

    url = raw_url.strip()

    try:
        parsed = urlparse(url)
        # Accessing .port validates it (raises ValueError when out of range)
        parsed.port
    except ValueError:
        return error_result(ErrorCode.invalid_input, 'Invalid URL.')

    if not parsed.scheme:
        return error_result(ErrorCode.invalid_input, 'Invalid URL.')

    if not is_http_url(parsed):
        return error_result(ErrorCode.unsupported_scheme, 'Only http/https URLs are allowed.')

    if not parsed.hostname:
        return error_result(ErrorCode.invalid_input, 'Invalid URL.')

    # simple_host: let "localhost"-style hosts through so the resolver can
    # reject them as blocked rather than as malformed
    if not validators.url(url, simple_host=True, strict_query=False):
        return error_result(ErrorCode.invalid_input, 'Invalid URL.')

    return ok_result({
        'url': url,
        'original': raw_url,
        'domain': parsed.hostname.lower(),
        'scheme': parsed.scheme.lower(),
    })


if __name__ == '__main__':
    # Test cases
    test_urls = [
        'https://amzn.to/3xYzAbC',
        'https://www.amazon.co.jp/dp/B000000000?tag=abc-22',
        'ftp://example.com/file',
        'amazon.com',
        'invalid-url',
        '',
    ]

    print("URL Normalizer Test Cases:")
    print("=" * 60)

    for test_url in test_urls:
        result = normalize_url(test_url)
        print(f"\nInput: {test_url!r}")
        print(f"Success: {result['success']}")
        if result['success']:
            print(f"URL: {result['data']['url']}")
            print(f"Domain: {result['data']['domain']}")
        else:
            print(f"Error [{result['error_code'].value}]: {result['error']}")
