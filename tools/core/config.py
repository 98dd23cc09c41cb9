"""
Configuration for the Link Cleaner.
Single source of truth for redirect limits, SSRF host policy, and the Amazon
host / tracking-parameter tables.

Numeric limits can be overridden through environment variables (or a .env file).
The tables are immutable so they can be shared freely between requests.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Redirect resolution
# ---------------------------------------------------------------------------
MAX_REDIRECTS = int(os.getenv("LINK_CLEANER_MAX_REDIRECTS", "5"))
FETCH_TIMEOUT_SECONDS = float(os.getenv("LINK_CLEANER_FETCH_TIMEOUT", "8"))

USER_AGENT = os.getenv(
    "LINK_CLEANER_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

ALLOWED_SCHEMES = ("http", "https")

# ---------------------------------------------------------------------------
# SSRF host policy
# ---------------------------------------------------------------------------
BLOCKED_HOSTS = frozenset({
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "::1",
})

BLOCKED_HOST_SUFFIXES = (".localhost",)

# Stand-in for the whole 127.0.0.0/8 loopback block
BLOCKED_HOST_PREFIXES = ("127.",)

# ---------------------------------------------------------------------------
# Amazon marketplaces
# ---------------------------------------------------------------------------
AMAZON_HOST_SUFFIXES = (
    "amazon.com",
    "amazon.co.jp",
    "amazon.co.uk",
    "amazon.de",
    "amazon.fr",
    "amazon.it",
    "amazon.es",
    "amazon.ca",
    "amazon.com.mx",
    "amazon.com.br",
    "amazon.com.au",
    "amazon.in",
    "amazon.nl",
    "amazon.se",
    "amazon.sg",
    "amazon.ae",
    "amazon.sa",
    "amazon.pl",
    "amazon.com.tr",
)

# Affiliate, referrer and search-placement parameters
REMOVE_PARAMS = frozenset({
    "tag",
    "linkCode",
    "ascsubtag",
    "ref",
    "ref_",
    "referrer",
    "creative",
    "creativeASIN",
    "camp",
    "encoding",
    "smid",
    "sprefix",
    "keywords",
    "crid",
    "qid",
    "sr",
    "th",
    "psc",
})

# pd_rd_* are Amazon-internal placement/redirect tracking parameters
REMOVE_PARAM_PREFIXES = ("pd_rd_",)

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------
REQUIRE_SAME_ORIGIN = os.getenv("LINK_CLEANER_REQUIRE_SAME_ORIGIN", "true").strip().lower() in ("1", "true", "yes")
