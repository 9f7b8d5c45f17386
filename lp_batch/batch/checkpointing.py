from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from lp_batch.batch.csv_codec import decode_line
from lp_batch.common.text import trim

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMN = "dataset"


def file_has_content(path: Path) -> bool:
    try:
        return os.path.getsize(path) > 0
    except OSError:
        return False


@dataclass
class ResultsCheckpoint:
    """Resume state derived from an existing results table.

    The table itself is the checkpoint: every dataset that already has a row
    is considered processed. Nothing else is persisted.

    Header detection only trusts a first row that names the key column.
    Any other first row is read as data with the key in column 0, so a header
    using a different spelling contributes a bogus key instead of being
    recognised.
    """

    path: Path
    key_column: str = DEFAULT_KEY_COLUMN
    processed: set[str] = field(default_factory=set)
    has_content: bool = False

    @classmethod
    def load(cls, path: Path, key_column: str = DEFAULT_KEY_COLUMN) -> "ResultsCheckpoint":
        path = Path(path)
        processed = _read_processed_keys(path, key_column)
        return cls(
            path=path,
            key_column=key_column,
            processed=processed,
            has_content=file_has_content(path),
        )

    def is_processed(self, key: str) -> bool:
        return key in self.processed

    def mark_processed(self, key: str) -> None:
        self.processed.add(key)


def _read_processed_keys(path: Path, key_column: str) -> set[str]:
    keys: set[str] = set()
    try:
        handle = path.open("r", encoding="utf-8", errors="replace", newline="\n")
    except OSError:
        return keys

    key_index: int | None = None
    with handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if not line:
                continue

            fields = decode_line(line)
            if key_index is None:
                key_index = _header_index(fields, key_column)
                if key_index is not None:
                    continue
                key_index = 0
                logger.warning(
                    "No '%s' column in first row of %s; treating it as data and using column 0 as resume key",
                    key_column,
                    path,
                )

            if key_index < len(fields):
                value = trim(fields[key_index])
                if value:
                    keys.add(value)

    logger.debug("Loaded %d processed keys from %s", len(keys), path)
    return keys


def _header_index(fields: list[str], key_column: str) -> int | None:
    for i, name in enumerate(fields):
        if trim(name) == key_column:
            return i
    return None
