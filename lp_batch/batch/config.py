from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from lp_batch.batch.errors import BatchConfigError


def _expand(path: str) -> Path:
    return Path(os.path.expanduser(path)).resolve()


def _read_toml(path: Path) -> dict[str, Any]:
    """Read TOML into a dict, supporting Python 3.10+.

    Uses tomllib when available, falls back to tomli.
    """
    data = path.read_bytes()
    try:
        import tomllib  # type: ignore[attr-defined]

        return tomllib.loads(data.decode("utf-8"))
    except ModuleNotFoundError:
        import tomli  # type: ignore[import-not-found]

        return tomli.loads(data.decode("utf-8"))


class SolverConfig(BaseModel):
    """Engine parameters, passed through to the engine untouched."""

    model_config = ConfigDict(frozen=True)

    time_limit: float = Field(default=3600.0, description="Time limit in seconds.")
    iter_limit: int = Field(default=2147483647, description="Iteration limit.")
    eps_opt: float = Field(default=1e-4, description="Relative optimality tolerance.")
    eps_feas: float = Field(default=1e-4, description="Relative feasibility tolerance.")
    eps_infeas_detect: float = Field(default=1e-10, description="Infeasibility detection tolerance.")
    eps_feas_polish: float = Field(default=1e-6, description="Relative feasibility polish tolerance.")
    feasibility_polishing: bool = Field(default=False)
    l_inf_ruiz_iter: int = Field(default=10, description="Iterations for L-inf Ruiz rescaling.")
    pock_chambolle_alpha: float = Field(default=1.0)
    has_pock_chambolle: bool = Field(default=True, description="Pock-Chambolle rescaling toggle.")
    bound_objective_rescaling: bool = Field(default=True)
    eval_freq: int = Field(default=200, description="Termination evaluation frequency.")
    sv_max_iter: int = Field(default=5000, description="Max iterations for singular value estimation.")
    sv_tol: float = Field(default=1e-4, description="Tolerance for singular value estimation.")
    verbose: bool = Field(default=False)
    debug: bool = Field(default=False)


class EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        default="scipy",
        description="Built-in engine name or an import reference 'package.module:factory'.",
    )


class OutputConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    fsync: bool = Field(default=True, description="fsync after every row, not just flush.")


class BatchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = Field(default_factory=EngineConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def load(cls, path: Path) -> "BatchConfig":
        try:
            raw = _read_toml(_expand(str(path)))
            return cls.model_validate(raw)
        except (OSError, ValueError) as exc:
            raise BatchConfigError(f"Failed to read config file {path}: {exc}") from exc

    def with_overrides(
        self,
        *,
        engine: str | None = None,
        solver: Mapping[str, Any] | None = None,
    ) -> "BatchConfig":
        """Return a copy with CLI values applied; None values are ignored."""
        update: dict[str, Any] = {}
        if engine is not None:
            update["engine"] = self.engine.model_copy(update={"name": engine})
        solver_update = {k: v for k, v in (solver or {}).items() if v is not None}
        if solver_update:
            merged = {**self.solver.model_dump(), **solver_update}
            update["solver"] = SolverConfig.model_validate(merged)
        if not update:
            return self
        return self.model_copy(update=update)
