"""Content identity for inline examples.

An inline example is named by the SHA-1 of its source text, encoded with the
URL-safe base64 alphabet. The name is also the cache key: identical sources
land in the same directory and any byte change moves them elsewhere.
"""

import base64
import hashlib
import re
from functools import lru_cache
from typing import Union

LEADING_SIGNS = re.compile(r"^[+-]+")


def fix_base64(value: str) -> str:
    """Make a base64 string usable as a path segment.

    Swaps ``+`` and ``/`` for ``-`` and ``_``, drops ``=`` padding, then strips
    every leading sign-like character so the token never reads as an option.

    Args:
        value: Standard or URL-safe base64 text.

    Returns:
        Path-safe token.
    """
    value = value.replace("+", "-").replace("/", "_").replace("=", "")
    return LEADING_SIGNS.sub("", value)


@lru_cache(maxsize=4096)
def _identity(data: bytes) -> str:
    digest = hashlib.sha1(data).digest()
    return fix_base64(base64.b64encode(digest).decode("ascii"))


def content_identity(source: Union[str, bytes]) -> str:
    """Return the stable identity of a piece of content.

    Args:
        source: Fragment text (UTF-8 encoded before hashing) or raw bytes.

    Returns:
        Filesystem-safe token derived from the content digest.
    """
    data = source.encode("utf-8") if isinstance(source, str) else bytes(source)
    return _identity(data)
