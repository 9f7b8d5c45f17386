from __future__ import annotations

from pathlib import Path

import numpy as np

from lp_batch.batch.config import SolverConfig
from lp_batch.engine.interfaces import TerminationReason
from lp_batch.engine.scipy_engine import ScipyLinprogEngine, load_linear_program


def _save_lp(path: Path, **arrays: np.ndarray) -> str:
    np.savez(path, **arrays)
    return str(path)


def test_load_linear_program_defaults(tmp_path: Path) -> None:
    path = _save_lp(tmp_path / "lp.npz", c=np.array([1.0, 2.0]))

    lp = load_linear_program(path)

    assert lp.n_vars == 2
    assert lp.a_ub.shape == (0, 2)
    assert lp.a_eq.shape == (0, 2)
    assert np.all(lp.lb == 0.0)
    assert np.all(np.isposinf(lp.ub))
    assert lp.c0 == 0.0


def test_parse_dataset_returns_none_for_unreadable_input(tmp_path: Path) -> None:
    engine = ScipyLinprogEngine()
    bad = tmp_path / "bad.npz"
    bad.write_text("not an archive")
    wrong_shape = _save_lp(tmp_path / "shape.npz", c=np.ones(3), A_ub=np.ones((2, 2)), b_ub=np.ones(2))

    assert engine.parse_dataset(str(tmp_path / "missing.npz")) is None
    assert engine.parse_dataset(str(bad)) is None
    assert engine.parse_dataset(wrong_shape) is None


def test_solve_small_lp_to_optimality(tmp_path: Path) -> None:
    # min -x - y  s.t.  x + 2y <= 4,  3x + y <= 6,  x, y >= 0  ->  x=1.6, y=1.2
    path = _save_lp(
        tmp_path / "lp.npz",
        c=np.array([-1.0, -1.0]),
        A_ub=np.array([[1.0, 2.0], [3.0, 1.0]]),
        b_ub=np.array([4.0, 6.0]),
        c0=np.array(10.0),
    )
    engine = ScipyLinprogEngine()
    problem = engine.parse_dataset(path)
    assert problem is not None

    result = engine.solve(problem, SolverConfig(eps_opt=1e-8, eps_feas=1e-8))

    assert result is not None
    assert result.termination_reason is TerminationReason.OPTIMAL
    assert abs(result.primal_objective_value - (10.0 - 2.8)) < 1e-6
    assert abs(result.dual_objective_value - (10.0 - 2.8)) < 1e-6
    assert result.relative_primal_residual < 1e-6
    assert result.relative_dual_residual < 1e-6
    assert result.relative_objective_gap < 1e-6
    assert result.runtime_sec >= 0.0
    assert result.feasibility_polishing_time_sec == 0.0


def test_solve_with_equality_and_bounds(tmp_path: Path) -> None:
    # min x + y  s.t.  x + y = 3,  1 <= x <= 2,  y >= 0  ->  objective 3
    path = _save_lp(
        tmp_path / "lp.npz",
        c=np.array([1.0, 1.0]),
        A_eq=np.array([[1.0, 1.0]]),
        b_eq=np.array([3.0]),
        lb=np.array([1.0, 0.0]),
        ub=np.array([2.0, np.inf]),
    )
    engine = ScipyLinprogEngine()
    result = engine.solve(engine.parse_dataset(path), SolverConfig(eps_opt=1e-8, eps_feas=1e-8))

    assert result is not None
    assert result.termination_reason is TerminationReason.OPTIMAL
    assert abs(result.primal_objective_value - 3.0) < 1e-6
    assert abs(result.dual_objective_value - 3.0) < 1e-6


def test_infeasible_lp_is_reported_not_failed(tmp_path: Path) -> None:
    # x <= -1 with x >= 0
    path = _save_lp(
        tmp_path / "lp.npz",
        c=np.array([1.0]),
        A_ub=np.array([[1.0]]),
        b_ub=np.array([-1.0]),
    )
    engine = ScipyLinprogEngine()
    result = engine.solve(engine.parse_dataset(path), SolverConfig())

    assert result is not None
    assert result.termination_reason is TerminationReason.PRIMAL_INFEASIBLE
