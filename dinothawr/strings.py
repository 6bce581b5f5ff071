"""Bounded string copying and C-style string utilities."""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple


class BoundedCopy(NamedTuple):
    """Result of a bounded copy: the text kept and the length that was wanted."""

    text: str
    length: int


def _c_string(text: str) -> str:
    """Return ``text`` up to its first NUL character."""
    return text.split("\0", 1)[0]


def _ascii_lower(char: str) -> str:
    return char.lower() if "A" <= char <= "Z" else char


def strlcpy(source: str, size: int) -> BoundedCopy:
    """Copy at most ``size - 1`` characters of ``source``.

    ``length`` is always the full length of ``source``, so a copy was
    truncated when ``length`` exceeds ``len(text)``.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    source = _c_string(source)
    keep = max(size - 1, 0)
    return BoundedCopy(source[:keep], len(source))


def strlcat(dest: str, source: str, size: int) -> BoundedCopy:
    """Append ``source`` to ``dest`` within a buffer of ``size`` characters.

    ``length`` is the length the concatenation would have without a bound.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    dest = _c_string(dest)
    used = len(dest)
    remaining = 0 if used > size else size - used
    tail = strlcpy(source, remaining)
    return BoundedCopy(dest + tail.text, used + tail.length)


def strcasecmp(a: str, b: str) -> int:
    """Compare two strings ignoring ASCII case.

    Returns zero when equal, otherwise the difference between the first
    pair of differing (lower-cased) characters.
    """
    a = _c_string(a)
    b = _c_string(b)
    for char_a, char_b in zip(a, b):
        lower_a = ord(_ascii_lower(char_a))
        lower_b = ord(_ascii_lower(char_b))
        if lower_a != lower_b:
            return lower_a - lower_b
    shared = min(len(a), len(b))
    rest_a = ord(_ascii_lower(a[shared])) if shared < len(a) else 0
    rest_b = ord(_ascii_lower(b[shared])) if shared < len(b) else 0
    return rest_a - rest_b


def isblank(char: str) -> bool:
    """Return True for a space or a horizontal tab."""
    if len(char) != 1:
        raise ValueError("isblank expects a single character")
    return char in (" ", "\t")


def strtok(text: str, delimiters: str) -> Iterator[str]:
    """Yield the non-empty tokens of ``text`` separated by any of ``delimiters``."""
    token: list[str] = []
    for char in _c_string(text):
        if char in delimiters:
            if token:
                yield "".join(token)
                token = []
        else:
            token.append(char)
    if token:
        yield "".join(token)