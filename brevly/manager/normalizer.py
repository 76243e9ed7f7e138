"""
URL normalization for stored targets.

Rules:
    - scheme and host are lower-cased
    - the scheme's default port (80 for http, 443 for https) is dropped
    - an empty path becomes "/"
    - trailing slashes are stripped from any path other than "/"
    - query pairs are sorted by key (stable, so repeated keys keep their order)
    - a bare root ("/" with no query and no fragment) is serialized without
      its trailing slash: "https://example.com/" -> "https://example.com"

The function is idempotent: normalize_url(normalize_url(u)) == normalize_url(u).
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


DEFAULT_PORTS = {"http": 80, "https": 443}


def _normalize_netloc(parts) -> str:
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    port = parts.port
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme.lower()):
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    return netloc


def normalize_url(url: str) -> str:
    """
    Canonicalize a URL for storage and comparison.

    Args:
        url (str): An absolute URL, already validated upstream.

    Returns:
        str: The canonical form, or ``url`` unchanged if it can't be parsed.
    """
    try:
        parts = urlsplit(url)
        netloc = _normalize_netloc(parts)
    except ValueError:
        return url

    path = parts.path
    if path != "/":
        path = path.rstrip("/")
    if not path:
        path = "/"

    query = parts.query
    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        pairs.sort(key=lambda kv: kv[0])
        query = urlencode(pairs)

    normalized = urlunsplit((parts.scheme.lower(), netloc, path, query, parts.fragment))
    if path == "/" and not query and not parts.fragment:
        normalized = normalized[:-1]
    return normalized
