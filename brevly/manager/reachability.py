"""
Reachability check run before a resolution is counted.

Strategy:
    - Try HTTP HEAD (follow redirects). 2xx or 3xx => reachable.
    - If the HEAD attempt raises (connect error, timeout, protocol error),
      try GET once with the same timeout and the same success rule.
    - Anything else => not reachable.

A HEAD that completes with e.g. 405 is an answer, not a failure to ask, so it
does not trigger the GET fallback.
"""

import logging
from typing import Optional

import httpx

log = logging.getLogger("brevly.manager")

DEFAULT_TIMEOUT = 5.0


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 400


class ReachabilityChecker:
    """
    Two-step HEAD→GET probe over an injectable httpx.Client.

    Args:
        client (Optional[httpx.Client]): Client to send probes with. Tests pass
            one built on ``httpx.MockTransport``; by default a redirect-following
            client is created.
        timeout (float): Seconds per attempt.
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self.client = client or httpx.Client(follow_redirects=True)

    def _probe(self, method: str, url: str) -> bool:
        # stream() so a GET fallback never downloads the body
        with self.client.stream(method, url, timeout=self.timeout, follow_redirects=True) as resp:
            return _is_success(resp.status_code)

    def is_reachable(self, url: str) -> bool:
        try:
            return self._probe("HEAD", url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("HEAD %s failed (%s); falling back to GET", url, exc)

        try:
            return self._probe("GET", url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.info("Target %s unreachable: %s", url, exc)
            return False

    def close(self) -> None:
        self.client.close()
