from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from lp_batch.batch.checkpointing import ResultsCheckpoint
from lp_batch.batch.config import BatchConfig, OutputConfig, SolverConfig
from lp_batch.batch.formatting import READ_ERROR, SOLVER_ERROR, error_row, result_row
from lp_batch.batch.manifest import DatasetEntry, Manifest
from lp_batch.batch.progress_ui import Ui
from lp_batch.batch.results_table import ResultsTable
from lp_batch.common.paths import instance_name
from lp_batch.engine.interfaces import SolveResult, SolverEngine
from lp_batch.engine.loader import load_engine

logger = logging.getLogger(__name__)

EXIT_OK: Final[int] = 0
EXIT_CONFIG_ERROR: Final[int] = 1
EXIT_PARTIAL_FAILURE: Final[int] = 2


@dataclass
class RunTally:
    solved: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.failed == 0 else EXIT_PARTIAL_FAILURE

    def summary(self) -> str:
        return f"Batch complete: {self.solved} solved, {self.failed} failed, {self.skipped} skipped."


@dataclass
class BatchRunner:
    """Solve every manifest entry that has no row in the results table yet.

    One dataset is parsed, solved and recorded before the next is looked at.
    Failures of a single dataset are recorded as a row and never stop the run.
    """

    engine: SolverEngine
    solver_config: SolverConfig
    output_config: OutputConfig = field(default_factory=OutputConfig)
    ui: Ui | None = None

    @classmethod
    def from_config(cls, config: BatchConfig, ui: Ui | None = None) -> "BatchRunner":
        return cls(
            engine=load_engine(config.engine.name),
            solver_config=config.solver,
            output_config=config.output,
            ui=ui,
        )

    def run(self, manifest: Manifest, output_path: Path) -> RunTally:
        output_path = Path(output_path)
        checkpoint = ResultsCheckpoint.load(output_path)
        if checkpoint.processed:
            logger.info("Resuming: %d datasets already recorded in %s", len(checkpoint.processed), output_path)

        tally = RunTally()
        task = None
        if self.ui is not None:
            task = self.ui.start_batch(total=sum(1 for _ in manifest.entries()))

        table = ResultsTable(path=output_path, fsync=self.output_config.fsync)
        with table.open(has_content=checkpoint.has_content):
            for entry in manifest.entries():
                if checkpoint.is_processed(entry.path):
                    tally.skipped += 1
                    status = "skipped"
                else:
                    checkpoint.mark_processed(entry.path)
                    status = self._process(entry, table)[2]
                    if status in (READ_ERROR, SOLVER_ERROR):
                        tally.failed += 1
                    else:
                        tally.solved += 1
                if task is not None and self.ui is not None:
                    self.ui.dataset_done(task, instance_name(entry.path), status)

        logger.info(tally.summary())
        return tally

    def _process(self, entry: DatasetEntry, table: ResultsTable) -> tuple[str, ...]:
        """Parse, solve and record one entry. Returns the row written for it."""
        logger.debug("Processing line %d: %s", entry.line_number, entry.path)

        problem = self._parse(entry)
        if problem is None:
            logger.error("Failed to read dataset at line %d: %s", entry.line_number, entry.path)
            return self._record(table, error_row(entry, READ_ERROR))

        try:
            result = self._solve(entry, problem)
            if result is None:
                logger.error("Solver failed for dataset at line %d: %s", entry.line_number, entry.path)
                return self._record(table, error_row(entry, SOLVER_ERROR))

            try:
                row = result_row(entry, result)
            except Exception:
                logger.exception("Engine returned a malformed result for %s", entry.path)
                row = error_row(entry, SOLVER_ERROR)
            try:
                return self._record(table, row)
            finally:
                self.engine.release(result)
        finally:
            self.engine.release(problem)

    @staticmethod
    def _record(table: ResultsTable, row: tuple[str, ...]) -> tuple[str, ...]:
        table.append(row)
        return row

    def _parse(self, entry: DatasetEntry) -> Any | None:
        try:
            return self.engine.parse_dataset(entry.path)
        except Exception:
            logger.exception("Dataset parser raised for %s", entry.path)
            return None

    def _solve(self, entry: DatasetEntry, problem: Any) -> SolveResult | None:
        try:
            return self.engine.solve(problem, self.solver_config)
        except Exception:
            logger.exception("Solver raised for %s", entry.path)
            return None
