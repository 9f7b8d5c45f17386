from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, TextIO

from lp_batch.batch.csv_codec import encode_row
from lp_batch.batch.errors import OutputTableError
from lp_batch.batch.formatting import RESULT_HEADER


@dataclass
class ResultsTable:
    """Append-only CSV results table.

    Every appended row is flushed (and fsynced unless disabled) before
    `append` returns, so an interrupted run never loses a completed row.
    """

    path: Path
    header: Sequence[str] = RESULT_HEADER
    fsync: bool = True
    _handle: TextIO | None = field(default=None, init=False, repr=False)

    def open(self, has_content: bool) -> "ResultsTable":
        """Open for append, or create the table and write the header."""
        mode = "a" if has_content else "w"
        try:
            self._handle = Path(self.path).open(mode, encoding="utf-8", newline="")
        except OSError as exc:
            raise OutputTableError(f"Failed to open CSV output file: {self.path} ({exc})") from exc
        if not has_content:
            self.append(self.header)
        return self

    def append(self, row: Sequence[str]) -> None:
        if self._handle is None:
            raise RuntimeError("ResultsTable is not open")
        self._handle.write(encode_row(row))
        self._handle.flush()
        if self.fsync:
            os.fsync(self._handle.fileno())

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "ResultsTable":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
