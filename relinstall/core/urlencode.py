"""
Percent-encoding for REST path segments.

GitLab addresses projects by their full path, which must be sent as a
single path segment (``group/name`` becomes ``group%2Fname``). Only ASCII
letters and digits pass through unchanged; unreserved punctuation such as
``-._~`` is encoded as well. Every string can be encoded, including
ones carrying lone surrogates.
"""

from urllib.parse import quote, unquote

# quote() leaves these unreserved characters alone even with safe=""
_UNRESERVED = {ord(c): f"%{ord(c):02X}" for c in "-._~"}


def encode_path_segment(value: str) -> str:
    """
    Percent-encode a string for use as a single URL path segment.

    Example:
        >>> encode_path_segment("relinstall/relctl")
        'relinstall%2Frelctl'
        >>> encode_path_segment("a b.c")
        'a%20b%2Ec'
    """
    return quote(value, safe="", errors="surrogatepass").translate(_UNRESERVED)


def decode_path_segment(value: str) -> str:
    """Inverse of encode_path_segment."""
    return unquote(value, errors="surrogatepass")
