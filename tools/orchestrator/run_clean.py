"""
Single Link Clean Orchestrator

Purpose: Run the full cleaning pipeline for one URL: validate, expand redirects, clean
Inputs: raw_url (str), redirect / timeout limits (optional)
Outputs: Result dict with CleanResult data (never raises for expected failures)
Dependencies: core/url_normalizer.py, core/redirect_resolver.py, ecommerce/clean_amazon_url.py
"""

import os
import sys
from typing import Dict, Any, Optional

import requests

# Allow imports from tools/ root
_TOOLS_DIR = os.path.join(os.path.dirname(__file__), "..")
if _TOOLS_DIR not in sys.path:
    sys.path.insert(0, _TOOLS_DIR)

from models.clean_result import CleanResult, ok_result
from core.config import MAX_REDIRECTS, FETCH_TIMEOUT_SECONDS
from core.url_normalizer import normalize_url
from core.redirect_resolver import resolve_redirects
from ecommerce.clean_amazon_url import clean_amazon_url


def run_clean(
    raw_url: Optional[str],
    max_redirects: int = MAX_REDIRECTS,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """
    Clean a single link end to end.

    Any failure short-circuits: the caller gets either a complete CleanResult
    or exactly one error, never a partial result. The cleaner only ever sees
    the final URL of the redirect chain.

    Args:
        raw_url: URL as submitted by the user
        max_redirects: Maximum redirects to follow
        timeout: Per-hop request timeout in seconds
        session: Optional requests session (mainly for tests)

    Returns:
        Dict with:
            - success: bool
            - data: CleanResult.to_dict() on success, {} otherwise
            - error: str or None
            - error_code: ErrorCode or None
    """
    norm_result = normalize_url(raw_url)
    if not norm_result['success']:
        return norm_result

    resolve_result = resolve_redirects(
        norm_result['data']['url'],
        max_redirects=max_redirects,
        timeout=timeout,
        session=session,
    )
    if not resolve_result['success']:
        return resolve_result

    expanded_url = resolve_result['data']['final_url']

    clean_result = clean_amazon_url(expanded_url)
    if not clean_result['success']:
        return clean_result

    result = CleanResult(
        input_url=raw_url,
        expanded_url=expanded_url,
        cleaned_url=clean_result['data']['cleaned_url'],
        asin=clean_result['data']['asin'],
        removed_params=clean_result['data']['removed_params'],
        redirect_hops=resolve_result['data']['hops'],
    )

    return ok_result(result.to_dict())
