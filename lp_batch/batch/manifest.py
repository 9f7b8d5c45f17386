from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from lp_batch.batch.errors import ManifestError, MissingRootError
from lp_batch.common import paths
from lp_batch.common.text import normalize_line

logger = logging.getLogger(__name__)


class ManifestState(Enum):
    AWAITING_ROOT = "awaiting_root"
    READING_ENTRIES = "reading_entries"


@dataclass(frozen=True)
class DatasetEntry:
    """One resolved dataset reference; `path` is also its resume key."""

    path: str
    line_number: int


@dataclass
class ManifestParser:
    """Line-by-line parser for the manifest grammar.

    The first meaningful line is the dataset root. Every later meaningful
    line is a dataset reference resolved against that root.
    """

    manifest_dir: str = "."
    state: ManifestState = ManifestState.AWAITING_ROOT
    root: str | None = field(default=None, init=False)

    def feed(self, line_number: int, raw: str) -> DatasetEntry | None:
        cleaned = normalize_line(raw)
        if not cleaned:
            return None

        if self.state is ManifestState.AWAITING_ROOT:
            root = cleaned
            if not paths.is_absolute(root):
                root = paths.join(self.manifest_dir, root)
            self.root = root
            self.state = ManifestState.READING_ENTRIES
            return None

        assert self.root is not None
        dataset_path = cleaned
        if not paths.is_absolute(dataset_path):
            dataset_path = paths.join(self.root, dataset_path)
        return DatasetEntry(path=dataset_path, line_number=line_number)


def parse_manifest_lines(lines: Iterable[str], manifest_dir: str = ".") -> tuple[str, Iterator[DatasetEntry]]:
    """Establish the root eagerly, then yield entries lazily.

    Raises MissingRootError when `lines` holds no meaningful line.
    """
    parser = ManifestParser(manifest_dir=manifest_dir)
    numbered = enumerate(lines, start=1)
    for line_number, raw in numbered:
        parser.feed(line_number, raw)
        if parser.state is ManifestState.READING_ENTRIES:
            break

    if parser.state is ManifestState.AWAITING_ROOT:
        raise MissingRootError("Datasets file does not define a dataset root path.")

    assert parser.root is not None

    def _entries() -> Iterator[DatasetEntry]:
        for line_number, raw in numbered:
            entry = parser.feed(line_number, raw)
            if entry is not None:
                yield entry

    return parser.root, _entries()


@dataclass(frozen=True)
class Manifest:
    path: str
    root: str
    lines: Sequence[str]

    def entries(self) -> Iterator[DatasetEntry]:
        _, entries = parse_manifest_lines(self.lines, paths.directory_of(self.path))
        return entries


def read_manifest(path: str | Path) -> Manifest:
    """Read a manifest file and establish its dataset root."""
    manifest_path = str(path)
    try:
        with open(manifest_path, encoding="utf-8", newline="\n") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Failed to open datasets file: {manifest_path} ({exc})") from exc

    raw_lines = text.split("\n")
    if raw_lines[-1] == "":
        raw_lines.pop()
    lines = [line[:-1] if line.endswith("\r") else line for line in raw_lines]
    root, _ = parse_manifest_lines(lines, paths.directory_of(manifest_path))
    logger.debug("Manifest %s uses dataset root %s", manifest_path, root)
    return Manifest(path=manifest_path, root=root, lines=tuple(lines))
