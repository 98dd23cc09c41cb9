"""
Canonical Clean Result Schema

Single source of truth for the link-cleaning output contract.
Every successful run produces a CleanResult; every tool reports through the
same {success, data, error, error_code} dict shape.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Failure taxonomy. All failures are terminal."""
    invalid_input = "invalid_input"
    unsupported_scheme = "unsupported_scheme"
    blocked_host = "blocked_host"
    missing_location = "missing_location"
    invalid_location = "invalid_location"
    too_many_redirects = "too_many_redirects"
    fetch_failed = "fetch_failed"
    unsupported_vendor = "unsupported_vendor"


def ok_result(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'success': True,
        'data': data,
        'error': None,
        'error_code': None,
    }


def error_result(error_code: ErrorCode, message: str) -> Dict[str, Any]:
    return {
        'success': False,
        'data': {},
        'error': message,
        'error_code': error_code,
    }


@dataclass(frozen=True)
class CleanResult:
    """Canonical output for a single link-cleaning run."""

    input_url: str
    expanded_url: str
    cleaned_url: str
    asin: Optional[str] = None
    removed_params: List[Dict[str, str]] = field(default_factory=list)  # [{key, value}] in query order
    redirect_hops: int = 0

    def to_dict(self) -> dict:
        """Convert to flat dict. `asin` is omitted when no ASIN was found."""
        d = asdict(self)
        if d['asin'] is None:
            del d['asin']
        return d
