from __future__ import annotations

from typing import Final

# ASCII whitespace, the set C isspace() accepts.
WHITESPACE: Final[str] = " \t\n\v\f\r"


def trim(value: str) -> str:
    return value.strip(WHITESPACE)


def normalize_line(raw: str) -> str:
    """Strip a trailing '#' comment and surrounding whitespace.

    '#' always starts a comment; there is no escaping or quoting.
    """
    hash_pos = raw.find("#")
    if hash_pos != -1:
        raw = raw[:hash_pos]
    return trim(raw)
