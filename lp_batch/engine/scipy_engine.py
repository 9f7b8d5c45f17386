from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.optimize import linprog

from lp_batch.batch.config import SolverConfig
from lp_batch.engine.interfaces import SolveResult, SolverEngine, TerminationReason


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearProgram:
    """min c'x + c0  s.t.  A_ub x <= b_ub,  A_eq x = b_eq,  lb <= x <= ub."""

    c: np.ndarray
    a_ub: np.ndarray
    b_ub: np.ndarray
    a_eq: np.ndarray
    b_eq: np.ndarray
    lb: np.ndarray
    ub: np.ndarray
    c0: float = 0.0

    @property
    def n_vars(self) -> int:
        return int(self.c.shape[0])


def _matrix(data: Any, key: str, n: int) -> np.ndarray:
    if key not in data.files:
        return np.zeros((0, n), dtype=np.float64)
    m = np.asarray(data[key], dtype=np.float64)
    if m.ndim != 2 or m.shape[1] != n:
        raise ValueError(f"{key} must have shape (m, {n}), got {m.shape}")
    return m


def _vector(data: Any, key: str, size: int, default: float) -> np.ndarray:
    if key not in data.files:
        return np.full(size, default, dtype=np.float64)
    v = np.asarray(data[key], dtype=np.float64).reshape(-1)
    if v.shape[0] != size:
        raise ValueError(f"{key} must have length {size}, got {v.shape[0]}")
    return v


def load_linear_program(path: str) -> LinearProgram:
    """Load an LP stored as a NumPy .npz archive.

    Required key: c. Optional keys: A_ub, b_ub, A_eq, b_eq, lb (default 0),
    ub (default +inf) and the scalar objective offset c0.
    """
    with np.load(path, allow_pickle=False) as data:
        c = np.asarray(data["c"], dtype=np.float64).reshape(-1)
        n = int(c.shape[0])
        a_ub = _matrix(data, "A_ub", n)
        a_eq = _matrix(data, "A_eq", n)
        return LinearProgram(
            c=c,
            a_ub=a_ub,
            b_ub=_vector(data, "b_ub", a_ub.shape[0], 0.0),
            a_eq=a_eq,
            b_eq=_vector(data, "b_eq", a_eq.shape[0], 0.0),
            lb=_vector(data, "lb", n, 0.0),
            ub=_vector(data, "ub", n, np.inf),
            c0=float(data["c0"]) if "c0" in data.files else 0.0,
        )


def _marginals(res: Any, name: str, size: int) -> np.ndarray:
    part = getattr(res, name, None)
    values = getattr(part, "marginals", None) if part is not None else None
    if values is None:
        return np.zeros(size, dtype=np.float64)
    return np.asarray(values, dtype=np.float64).reshape(-1)


def _finite_dot(bounds: np.ndarray, duals: np.ndarray) -> float:
    mask = np.isfinite(bounds)
    return float(bounds[mask] @ duals[mask])


def _termination_reason(status: int, message: str) -> TerminationReason | None:
    if status == 0:
        return TerminationReason.OPTIMAL
    if status == 1:
        if "time" in message.lower():
            return TerminationReason.TIME_LIMIT
        return TerminationReason.ITERATION_LIMIT
    if status == 2:
        return TerminationReason.PRIMAL_INFEASIBLE
    if status == 3:
        return TerminationReason.DUAL_INFEASIBLE
    # 4: numerical difficulties, no usable result
    return None


class ScipyLinprogEngine(SolverEngine):
    """Reference engine: HiGHS interior point through scipy.optimize.linprog.

    Only the solver parameters HiGHS understands are used (limits,
    tolerances and verbosity); rescaling and polishing settings are ignored.
    """

    method = "highs-ipm"

    def parse_dataset(self, path: str) -> LinearProgram | None:
        try:
            return load_linear_program(path)
        except Exception as exc:
            logger.debug("Could not load LP from %s: %s", path, exc)
            return None

    def solve(self, problem: LinearProgram, config: SolverConfig) -> SolveResult | None:
        options = {
            "time_limit": float(config.time_limit),
            "maxiter": int(config.iter_limit),
            "disp": bool(config.verbose),
            "primal_feasibility_tolerance": float(config.eps_feas),
            "dual_feasibility_tolerance": float(config.eps_feas),
            "ipm_optimality_tolerance": float(config.eps_opt),
        }
        bounds = [
            (None if np.isneginf(lo) else float(lo), None if np.isposinf(hi) else float(hi))
            for lo, hi in zip(problem.lb, problem.ub)
        ]

        started = time.perf_counter()
        res = linprog(
            problem.c,
            A_ub=problem.a_ub if problem.a_ub.shape[0] else None,
            b_ub=problem.b_ub if problem.a_ub.shape[0] else None,
            A_eq=problem.a_eq if problem.a_eq.shape[0] else None,
            b_eq=problem.b_eq if problem.a_eq.shape[0] else None,
            bounds=bounds,
            method=self.method,
            options=options,
        )
        runtime = time.perf_counter() - started

        reason = _termination_reason(int(res.status), str(res.message))
        if reason is None:
            logger.debug("linprog gave no usable result: %s", res.message)
            return None

        return SolveResult(
            termination_reason=reason,
            runtime_sec=runtime,
            iterations=int(getattr(res, "nit", 0) or 0),
            **_quality_metrics(problem, res),
        )

    def release(self, obj: Any) -> None:
        # NumPy buffers are reclaimed by the garbage collector.
        return


def _quality_metrics(problem: LinearProgram, res: Any) -> dict[str, float]:
    x = getattr(res, "x", None)
    if x is None:
        nan = float("nan")
        return {
            "primal_objective_value": nan,
            "dual_objective_value": nan,
            "relative_primal_residual": nan,
            "relative_dual_residual": nan,
            "absolute_objective_gap": nan,
            "relative_objective_gap": nan,
        }

    x = np.asarray(x, dtype=np.float64)
    y_ub = _marginals(res, "ineqlin", problem.a_ub.shape[0])
    y_eq = _marginals(res, "eqlin", problem.a_eq.shape[0])
    z_lo = _marginals(res, "lower", problem.n_vars)
    z_hi = _marginals(res, "upper", problem.n_vars)

    primal = float(problem.c @ x) + problem.c0
    dual = (
        float(problem.b_ub @ y_ub)
        + float(problem.b_eq @ y_eq)
        + _finite_dot(problem.lb, z_lo)
        + _finite_dot(problem.ub, z_hi)
        + problem.c0
    )

    primal_violation = np.concatenate(
        [np.maximum(problem.a_ub @ x - problem.b_ub, 0.0), problem.a_eq @ x - problem.b_eq]
    )
    rhs_norm = float(np.linalg.norm(np.concatenate([problem.b_ub, problem.b_eq])))
    reduced = problem.c - problem.a_ub.T @ y_ub - problem.a_eq.T @ y_eq - z_lo - z_hi

    gap = abs(primal - dual)
    return {
        "primal_objective_value": primal,
        "dual_objective_value": dual,
        "relative_primal_residual": float(np.linalg.norm(primal_violation)) / (1.0 + rhs_norm),
        "relative_dual_residual": float(np.linalg.norm(reduced)) / (1.0 + float(np.linalg.norm(problem.c))),
        "absolute_objective_gap": gap,
        "relative_objective_gap": gap / (1.0 + abs(primal) + abs(dual)),
    }
