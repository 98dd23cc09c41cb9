from urllib.parse import urlparse

import pytest

from core.url_safety import is_blocked_host, is_amazon_host, check_url_safety
from models.clean_result import ErrorCode


@pytest.mark.parametrize("host", [
    "localhost",
    "LOCALHOST",
    "localhost.",
    "127.0.0.1",
    "127.10.20.30",
    "0.0.0.0",
    "::1",
    "admin.localhost",
])
def test_blocked_hosts(host):
    assert is_blocked_host(host)


@pytest.mark.parametrize("host", [
    "www.amazon.com",
    "amzn.to",
    "128.0.0.1",
    "10.0.0.1",
    "localhost.example.com",
    "",
    None,
])
def test_allowed_hosts(host):
    assert not is_blocked_host(host)


def test_blocked_hosts_can_be_substituted():
    assert is_blocked_host("internal.corp", blocked_hosts={"internal.corp"})
    assert not is_blocked_host("localhost", blocked_hosts=set(), blocked_suffixes=(), blocked_prefixes=())


@pytest.mark.parametrize("host", [
    "amazon.com",
    "www.amazon.com",
    "smile.amazon.com",
    "WWW.AMAZON.CO.JP",
    "www.amazon.com.tr",
])
def test_amazon_hosts(host):
    assert is_amazon_host(host)


@pytest.mark.parametrize("host", [
    "example.com",
    "notamazon.com",
    "amazon.com.evil.net",
    "amazon.cn",
    "",
    None,
])
def test_non_amazon_hosts(host):
    assert not is_amazon_host(host)


def test_check_url_safety_passes_regular_url():
    assert check_url_safety(urlparse("https://amzn.to/3xYzAbC")) is None


def test_check_url_safety_rejects_scheme():
    result = check_url_safety(urlparse("ftp://example.com/file"))
    assert result['error_code'] == ErrorCode.unsupported_scheme
    assert result['error'] == 'URL scheme must be http or https.'


def test_check_url_safety_redirect_messages():
    scheme = check_url_safety(urlparse("file:///etc/passwd"), redirected=True)
    assert scheme['error'] == 'Redirected to unsupported scheme.'

    host = check_url_safety(urlparse("http://localhost:8080/admin"), redirected=True)
    assert host['error_code'] == ErrorCode.blocked_host
    assert host['error'] == 'Redirected to blocked hostname.'
