from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol

from lp_batch.batch.config import SolverConfig


class TerminationReason(IntEnum):
    """Why the engine stopped working on a dataset."""

    UNSPECIFIED = 0
    OPTIMAL = 1
    PRIMAL_INFEASIBLE = 2
    DUAL_INFEASIBLE = 3
    TIME_LIMIT = 4
    ITERATION_LIMIT = 5
    FEAS_POLISH_SUCCESS = 6


@dataclass(frozen=True)
class SolveResult:
    """Outcome of one successful engine call.

    `termination_reason` may be a raw engine code; codes outside
    TerminationReason are reported as UNKNOWN.
    """

    termination_reason: TerminationReason | int
    runtime_sec: float
    iterations: int
    primal_objective_value: float
    dual_objective_value: float
    relative_primal_residual: float
    relative_dual_residual: float
    absolute_objective_gap: float
    relative_objective_gap: float
    feasibility_polishing_time_sec: float = 0.0
    feasibility_polishing_iterations: int = 0


class SolverEngine(Protocol):
    """Parse datasets and solve them.

    Both operations signal failure by returning None; no further detail is
    expected by the batch runner.
    """

    def parse_dataset(self, path: str) -> Any | None:
        ...

    def solve(self, problem: Any, config: SolverConfig) -> SolveResult | None:
        ...

    def release(self, obj: Any) -> None:
        """Free engine resources held by a problem or result."""
        ...
