"""Charset resolution for HTTP response bodies."""

import codecs

from url_handler.constants import DEFAULT_CHARSET


_CHARSET_PREFIX = "charset="


def get_charset_from_content_type(content_type: str | None) -> str:
    """Extract the charset from a Content-Type header value.

    Parameters are split on ';' and the ``charset=`` key is matched
    case-insensitively. When several parameters declare a charset the
    last one wins.

    Args:
        content_type: The Content-Type header value, if any.

    Returns:
        The declared charset, or ISO-8859-1 when none is declared
        (RFC 2616 section 3.7.1).
    """
    charset: str | None = None

    if content_type is not None:
        for element in content_type.split(";"):
            element = element.strip()
            if element.lower().startswith(_CHARSET_PREFIX):
                charset = element[len(_CHARSET_PREFIX) :]

    if not charset:
        charset = DEFAULT_CHARSET

    return charset


def decode_text(data: bytes, charset: str) -> str:
    """Decode body bytes with a resolved charset.

    Malformed input is replaced rather than rejected. A charset Python
    does not know falls back to ISO-8859-1.

    Args:
        data: Raw body bytes.
        charset: Charset name from the Content-Type header.

    Returns:
        Decoded text.
    """
    try:
        codecs.lookup(charset)
    except LookupError:
        charset = DEFAULT_CHARSET
    return data.decode(charset, errors="replace")
