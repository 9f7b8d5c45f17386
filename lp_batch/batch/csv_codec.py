"""Minimal CSV codec for the results table.

The decoder is deliberately permissive: a quote anywhere outside a quoted
section opens one, so values written by hand or by other tools still yield
their resume key.
"""
from __future__ import annotations

from typing import Final, Sequence

DELIMITER: Final[str] = ","
QUOTE: Final[str] = '"'
_NEEDS_QUOTING: Final[frozenset[str]] = frozenset({DELIMITER, QUOTE, "\n"})


def encode_field(field: str) -> str:
    if not any(ch in _NEEDS_QUOTING for ch in field):
        return field
    return QUOTE + field.replace(QUOTE, QUOTE * 2) + QUOTE


def encode_row(fields: Sequence[str]) -> str:
    """Encode one row, terminated by a single newline."""
    return DELIMITER.join(encode_field(f) for f in fields) + "\n"


def decode_line(line: str) -> list[str]:
    """Split one physical line into fields, undoing quote escaping."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == QUOTE:
                if i + 1 < n and line[i + 1] == QUOTE:
                    current.append(QUOTE)
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(ch)
        elif ch == QUOTE:
            in_quotes = True
        elif ch == DELIMITER:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields
