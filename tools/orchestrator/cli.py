"""
Link Cleaner CLI

Usage:
    python tools/orchestrator/cli.py "https://amzn.to/3xYzAbC"
    python tools/orchestrator/cli.py URL1 URL2 --json
    python tools/orchestrator/cli.py URL --max-redirects 10 --timeout 5
    link-cleaner URL
"""

import argparse
import json
import os
import sys

# Ensure tools/ is on the path so subpackage imports work
_TOOLS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..")
if _TOOLS_DIR not in sys.path:
    sys.path.insert(0, _TOOLS_DIR)

from core.config import MAX_REDIRECTS, FETCH_TIMEOUT_SECONDS
from core.redirect_resolver import create_session
from orchestrator.run_clean import run_clean


def _print_text(raw_url, result):
    print(f"\n{'='*60}")
    print(f"  {raw_url}")
    print(f"{'='*60}")

    if not result['success']:
        print(f"  [FAIL] {result['error']}")
        return

    data = result['data']
    removed = ', '.join(f"{p['key']}={p['value']}" for p in data['removed_params'])
    print(f"  Expanded URL:  {data['expanded_url']}")
    print(f"  Cleaned URL:   {data['cleaned_url']}")
    print(f"  ASIN:          {data.get('asin') or '-'}")
    print(f"  Removed:       {removed or '-'}")
    print(f"  Redirect hops: {data['redirect_hops']}")


def _to_json(raw_url, result):
    if result['success']:
        return result['data']
    return {
        'input_url': raw_url,
        'error': result['error'],
        'error_code': result['error_code'].value,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Expand Amazon links and strip tracking parameters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("urls", nargs="+", help="URL(s) to clean")
    parser.add_argument("--max-redirects", type=int, default=MAX_REDIRECTS,
                        help=f"Maximum redirects to follow (default: {MAX_REDIRECTS})")
    parser.add_argument("--timeout", type=float, default=FETCH_TIMEOUT_SECONDS,
                        help=f"Per-hop timeout in seconds (default: {FETCH_TIMEOUT_SECONDS:g})")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    args = parser.parse_args(argv)

    session = create_session()
    results = []
    try:
        for raw_url in args.urls:
            result = run_clean(
                raw_url,
                max_redirects=args.max_redirects,
                timeout=args.timeout,
                session=session,
            )
            results.append((raw_url, result))
    finally:
        session.close()

    if args.json:
        payload = [_to_json(raw_url, result) for raw_url, result in results]
        print(json.dumps(payload if len(payload) > 1 else payload[0], indent=2, ensure_ascii=False))
    else:
        for raw_url, result in results:
            _print_text(raw_url, result)

    failed = sum(1 for _, result in results if not result['success'])
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
