"""URL canonicalization before a URL is dereferenced."""

import re
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

import httpx

from url_handler.constants import NORMALIZED_SCHEMES
from url_handler.errors import MalformedURLError


# A percent-encoded percent sign followed by an escape, e.g. %2520
DOUBLE_ESCAPE_PATTERN = re.compile(r"%25([0-9a-fA-F]{2})")

# A '%' that does not start a valid escape sequence
_STRAY_PERCENT_PATTERN = re.compile(r"%(?![0-9a-fA-F]{2})")

# Characters left unescaped per component (RFC 3986 pchar and friends)
_AUTHORITY_SAFE = "!$&'()*+,;=:@[]-._~%"
_PATH_SAFE = "/!$&'()*+,;=:@-._~%"
_QUERY_SAFE = "/?!$&'()*+,;=:@-._~%"


def normalize_to_string(url: str) -> str:
    """Canonicalize an http(s) URL into a single unambiguous string.

    Non-http(s) URLs are returned unchanged. For http(s) URLs:
    - Characters illegal in each component are percent-encoded
    - Dot segments are removed from the path
    - Literal '+' is escaped to %2B
    - Double escapes such as %2520 are collapsed to %20

    Args:
        url: The URL to canonicalize.

    Returns:
        Canonical URL string.

    Raises:
        MalformedURLError: If the URL cannot be rebuilt into a valid URI.
    """
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise MalformedURLError(url) from e

    if parts.scheme.lower() not in NORMALIZED_SCHEMES:
        return url

    rebuilt = _rebuild(url, parts)

    # '+' is ambiguous with an encoded space for some servers
    rebuilt = rebuilt.replace("+", "%2B")

    # The input may already have been (partially) escaped
    return DOUBLE_ESCAPE_PATTERN.sub(r"%\1", rebuilt)


def normalize_to_url(url: str) -> httpx.URL:
    """Canonicalize a URL and parse the result.

    Args:
        url: The URL to canonicalize.

    Returns:
        Parsed canonical URL.

    Raises:
        MalformedURLError: If the URL cannot be rebuilt into a valid URI.
    """
    normalized = normalize_to_string(url)
    try:
        return httpx.URL(normalized)
    except httpx.InvalidURL as e:
        raise MalformedURLError(url) from e


def remove_dot_segments(path: str) -> str:
    """Remove '.' and '..' segments from a path (RFC 3986 section 5.2.4).

    Args:
        path: URI path component.

    Returns:
        Path with dot segments resolved.
    """
    if "." not in path:
        return path

    output: list[str] = []
    remaining = path
    while remaining:
        if remaining.startswith("../"):
            remaining = remaining[3:]
        elif remaining.startswith("./"):
            remaining = remaining[2:]
        elif remaining.startswith("/./"):
            remaining = remaining[2:]
        elif remaining == "/.":
            remaining = "/"
        elif remaining.startswith("/../"):
            remaining = remaining[3:]
            if output:
                output.pop()
        elif remaining == "/..":
            remaining = "/"
            if output:
                output.pop()
        elif remaining in {".", ".."}:
            remaining = ""
        else:
            start = 1 if remaining.startswith("/") else 0
            end = remaining.find("/", start)
            if end == -1:
                end = len(remaining)
            output.append(remaining[:end])
            remaining = remaining[end:]
    return "".join(output)


def _rebuild(url: str, parts: SplitResult) -> str:
    """Rebuild an http(s) URL from its escaped components.

    Args:
        url: Original URL, used for error reporting.
        parts: Split components of the URL.

    Returns:
        ASCII-only URL string.

    Raises:
        MalformedURLError: If a component is not valid.
    """
    try:
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        raise MalformedURLError(url) from e

    if not parts.netloc:
        raise MalformedURLError(url) from ValueError("missing authority")

    scheme = parts.scheme.lower()
    netloc = _escape(parts.netloc, _AUTHORITY_SAFE)
    path = remove_dot_segments(_escape(parts.path, _PATH_SAFE))
    query = _escape(parts.query, _QUERY_SAFE)
    fragment = _escape(parts.fragment, _QUERY_SAFE)

    rebuilt = urlunsplit((scheme, netloc, path, query, fragment))
    # urlunsplit drops empty separators that were present in the input
    if not query and "?" in url and "#" not in url.split("?", 1)[0]:
        rebuilt = _insert_before_fragment(rebuilt, "?")
    if not fragment and url.endswith("#"):
        rebuilt += "#"
    return rebuilt


def _escape(component: str, safe: str) -> str:
    """Percent-encode a URL component, keeping valid escapes intact.

    Args:
        component: Raw component text.
        safe: Characters that must not be escaped.

    Returns:
        ASCII-only component.
    """
    if not component:
        return component
    component = _STRAY_PERCENT_PATTERN.sub("%25", component)
    return quote(component, safe=safe, encoding="utf-8")


def _insert_before_fragment(url: str, text: str) -> str:
    head, sep, fragment = url.partition("#")
    return f"{head}{text}{sep}{fragment}"
