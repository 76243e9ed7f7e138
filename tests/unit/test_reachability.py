"""
Unit tests for ReachabilityChecker (HEAD first, GET only if HEAD raised).

All traffic goes through httpx.MockTransport; nothing leaves the process.
"""

import httpx
import pytest

from brevly.manager.reachability import ReachabilityChecker


def _checker(handler, timeout=5.0):
    client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
    return ReachabilityChecker(client=client, timeout=timeout)


class Recorder:
    """Handler that answers per method and records what it saw."""

    def __init__(self, head, get=None):
        self.head = head
        self.get = get
        self.methods = []
        self.timeouts = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.methods.append(request.method)
        self.timeouts.append(request.extensions.get("timeout", {}).get("read"))
        outcome = self.head if request.method == "HEAD" else self.get
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome)


@pytest.mark.parametrize("status,expected", [(200, True), (204, True), (404, False), (500, False)])
def test_head_status_decides(status, expected):
    handler = Recorder(head=status)
    assert _checker(handler).is_reachable("https://example.com") is expected
    assert handler.methods == ["HEAD"]


def test_head_405_does_not_fall_back():
    handler = Recorder(head=405, get=200)
    assert _checker(handler).is_reachable("https://example.com") is False
    assert handler.methods == ["HEAD"]


def test_redirects_are_followed():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "https://example.com/new"})
        return httpx.Response(200)

    assert _checker(handler).is_reachable("https://example.com/old") is True


def test_head_error_falls_back_to_get():
    handler = Recorder(head=httpx.ConnectError("refused"), get=200)
    assert _checker(handler).is_reachable("https://example.com") is True
    assert handler.methods == ["HEAD", "GET"]


def test_head_timeout_then_get_failure_status():
    handler = Recorder(head=httpx.ReadTimeout("slow"), get=503)
    assert _checker(handler).is_reachable("https://example.com") is False
    assert handler.methods == ["HEAD", "GET"]


def test_both_attempts_raise():
    handler = Recorder(head=httpx.ConnectError("refused"), get=httpx.ConnectTimeout("slow"))
    assert _checker(handler).is_reachable("https://example.com") is False
    assert handler.methods == ["HEAD", "GET"]


def test_timeout_applies_to_each_attempt():
    handler = Recorder(head=httpx.ReadTimeout("slow"), get=200)
    _checker(handler, timeout=1.5).is_reachable("https://example.com")
    assert handler.timeouts == [1.5, 1.5]
