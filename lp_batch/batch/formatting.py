from __future__ import annotations

from typing import Final

from lp_batch.batch.manifest import DatasetEntry
from lp_batch.common.paths import instance_name
from lp_batch.engine.interfaces import SolveResult, TerminationReason

RESULT_HEADER: Final[tuple[str, ...]] = (
    "dataset",
    "instance",
    "termination_reason",
    "runtime_sec",
    "iterations_count",
    "primal_objective_value",
    "dual_objective_value",
    "relative_primal_residual",
    "relative_dual_residual",
    "absolute_objective_gap",
    "relative_objective_gap",
    "feasibility_polishing_time_sec",
    "feasibility_polishing_iteration_count",
)

READ_ERROR: Final[str] = "READ_ERROR"
SOLVER_ERROR: Final[str] = "SOLVER_ERROR"
UNKNOWN: Final[str] = "UNKNOWN"


def termination_reason_name(reason: object) -> str:
    if isinstance(reason, TerminationReason):
        return reason.name
    try:
        return TerminationReason(reason).name
    except (ValueError, TypeError):
        return UNKNOWN


def to_scientific(value: float) -> str:
    """Scientific notation with 17 significant digits, enough to round-trip a double."""
    return f"{float(value):.16e}"


def _empty_row(entry: DatasetEntry) -> list[str]:
    row = [""] * len(RESULT_HEADER)
    row[0] = entry.path
    row[1] = instance_name(entry.path)
    return row


def error_row(entry: DatasetEntry, status: str) -> tuple[str, ...]:
    """Row for a dataset that produced no result; only identity and status are set."""
    row = _empty_row(entry)
    row[2] = status
    return tuple(row)


def result_row(entry: DatasetEntry, result: SolveResult) -> tuple[str, ...]:
    row = _empty_row(entry)
    row[2] = termination_reason_name(result.termination_reason)
    row[3] = to_scientific(result.runtime_sec)
    row[4] = str(int(result.iterations))
    row[5] = to_scientific(result.primal_objective_value)
    row[6] = to_scientific(result.dual_objective_value)
    row[7] = to_scientific(result.relative_primal_residual)
    row[8] = to_scientific(result.relative_dual_residual)
    row[9] = to_scientific(result.absolute_objective_gap)
    row[10] = to_scientific(result.relative_objective_gap)
    # Blank polishing columns mean polishing did not run.
    polish_time = float(result.feasibility_polishing_time_sec)
    if polish_time > 0.0:
        row[11] = to_scientific(polish_time)
        row[12] = str(int(result.feasibility_polishing_iterations))
    return tuple(row)
