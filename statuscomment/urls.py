"""URL normalization for links extracted from comment bodies.

Links found in previously rendered comments may contain raw spaces or
unescaped colons inside query values. ``ensure_properly_encoded_url`` turns
them into valid, percent-encoded URLs, or returns None when no valid URL can
be produced. Malformed input is an expected case and never raises.
"""

import re
from typing import Optional
from urllib.parse import quote, unquote, urlencode, urlsplit

# Schemes that must carry a host to be valid
SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp"}

_FORBIDDEN_HOST_CHARS = re.compile(r'[\s%<>^|\\"`{}]')

# A colon inside the query that is not already encoded and does not start "://"
_UNENCODED_QUERY_COLON = re.compile(r"([^%]|^):(?!//|%2F%2F)")


def is_valid_url(url: str) -> bool:
    """Check whether a string parses as an absolute URL."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError:
        return False

    if not parts.scheme:
        return False

    if parts.scheme.lower() in SPECIAL_SCHEMES:
        host = parts.hostname
        if not host:
            return False
        if "[" not in parts.netloc and _FORBIDDEN_HOST_CHARS.search(host):
            return False

    return True


def _reencode_query(query_string: str) -> str:
    """Decode each key=value pair, then encode all of them canonically."""
    params: dict[str, str] = {}
    for pair in query_string.split("&"):
        key, sep, value = pair.partition("=")
        if not sep or not key:
            continue
        params[unquote(key)] = unquote(value)
    return urlencode(params, quote_via=quote, safe="")


def ensure_properly_encoded_url(url: str) -> Optional[str]:
    """Return a properly encoded version of ``url``, or None if it cannot be fixed.

    Already-valid URLs without raw spaces are returned unchanged. Valid URLs
    with spaces get their query re-encoded (or spaces replaced in a URL
    without a query). Unparseable URLs get a best-effort repair and are
    validated again. Surrounding whitespace is dropped first.
    """
    url = url.strip()
    if is_valid_url(url):
        if " " not in url:
            return url

        base_url, sep, query_string = url.partition("?")
        if sep and query_string:
            return f"{base_url}?{_reencode_query(query_string)}"
        return url.replace(" ", "%20")

    fixed_url = url.replace(" ", "%20")

    base_url, sep, query_string = fixed_url.partition("?")
    if sep and query_string:
        fixed_query = _UNENCODED_QUERY_COLON.sub(r"\1%3A", query_string)
        fixed_url = f"{base_url}?{fixed_query}"

    if is_valid_url(fixed_url):
        return fixed_url
    return None
