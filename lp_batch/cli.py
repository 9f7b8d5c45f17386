from __future__ import annotations

import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Sequence

import typer
from typer.main import get_command

from lp_batch.batch.config import BatchConfig
from lp_batch.batch.errors import BatchConfigError
from lp_batch.batch.manifest import read_manifest
from lp_batch.batch.progress_ui import progress_ui
from lp_batch.batch.runner import EXIT_CONFIG_ERROR, BatchRunner
from lp_batch.common.logging_config import configure_logging

logger = logging.getLogger(__name__)

EPILOG = (
    "Datasets file format: the first non-empty line is the dataset root directory; "
    "subsequent lines are dataset paths relative to the root (or absolute paths). "
    "'#' starts a comment."
)

app = typer.Typer(add_completion=False)


@app.command(epilog=EPILOG)
def run(
    datasets_txt: str = typer.Argument(..., help="Manifest: dataset root, then one dataset per line"),
    output_csv: str = typer.Argument(..., help="Results table; appended to when it already exists"),
    config: Optional[str] = typer.Option(None, "--config", help="TOML file with engine, solver and output tables"),
    engine: Optional[str] = typer.Option(None, "--engine", help="Engine name (scipy) or 'package.module:factory'"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show a progress bar"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose engine output"),
    debug: bool = typer.Option(False, "-d", "--debug", help="Enable debug logging"),
    time_limit: Optional[float] = typer.Option(None, "--time_limit", "--time-limit", help="Time limit in seconds (default: 3600.0)"),
    iter_limit: Optional[int] = typer.Option(None, "--iter_limit", "--iter-limit", help="Iteration limit (default: 2147483647)"),
    eps_opt: Optional[float] = typer.Option(None, "--eps_opt", "--eps-opt", help="Relative optimality tolerance (default: 1e-4)"),
    eps_feas: Optional[float] = typer.Option(None, "--eps_feas", "--eps-feas", help="Relative feasibility tolerance (default: 1e-4)"),
    eps_infeas_detect: Optional[float] = typer.Option(
        None, "--eps_infeas_detect", "--eps-infeas-detect", help="Infeasibility detection tolerance (default: 1e-10)"
    ),
    eps_feas_polish: Optional[float] = typer.Option(
        None, "--eps_feas_polish", "--eps-feas-polish", help="Relative feasibility polish tolerance (default: 1e-6)"
    ),
    feasibility_polishing: bool = typer.Option(
        False, "-f", "--feasibility_polishing", "--feasibility-polishing", help="Enable feasibility polishing"
    ),
    l_inf_ruiz_iter: Optional[int] = typer.Option(
        None, "--l_inf_ruiz_iter", "--l-inf-ruiz-iter", help="Iterations for L-inf Ruiz rescaling (default: 10)"
    ),
    pock_chambolle_alpha: Optional[float] = typer.Option(
        None, "--pock_chambolle_alpha", "--pock-chambolle-alpha", help="Value for Pock-Chambolle alpha (default: 1.0)"
    ),
    no_pock_chambolle: bool = typer.Option(
        False, "--no_pock_chambolle", "--no-pock-chambolle", help="Disable Pock-Chambolle rescaling"
    ),
    no_bound_obj_rescaling: bool = typer.Option(
        False, "--no_bound_obj_rescaling", "--no-bound-obj-rescaling", help="Disable bound objective rescaling"
    ),
    eval_freq: Optional[int] = typer.Option(
        None, "--eval_freq", "--eval-freq", help="Termination evaluation frequency (default: 200)"
    ),
    sv_max_iter: Optional[int] = typer.Option(
        None, "--sv_max_iter", "--sv-max-iter", help="Max iterations for singular value estimation (default: 5000)"
    ),
    sv_tol: Optional[float] = typer.Option(
        None, "--sv_tol", "--sv-tol", help="Tolerance for singular value estimation (default: 1e-4)"
    ),
) -> None:
    """Solve every dataset in DATASETS_TXT and append one row per dataset to OUTPUT_CSV.

    Datasets that already have a row in OUTPUT_CSV are skipped, so an
    interrupted run can simply be started again.
    """
    configure_logging(logging.DEBUG if debug else logging.INFO, log_file=log_file)

    # Flags only switch settings on; absent flags keep the config file values.
    solver_overrides = {
        "verbose": True if verbose else None,
        "debug": True if debug else None,
        "time_limit": time_limit,
        "iter_limit": iter_limit,
        "eps_opt": eps_opt,
        "eps_feas": eps_feas,
        "eps_infeas_detect": eps_infeas_detect,
        "eps_feas_polish": eps_feas_polish,
        "feasibility_polishing": True if feasibility_polishing else None,
        "l_inf_ruiz_iter": l_inf_ruiz_iter,
        "pock_chambolle_alpha": pock_chambolle_alpha,
        "has_pock_chambolle": False if no_pock_chambolle else None,
        "bound_objective_rescaling": False if no_bound_obj_rescaling else None,
        "eval_freq": eval_freq,
        "sv_max_iter": sv_max_iter,
        "sv_tol": sv_tol,
    }

    try:
        base = BatchConfig.load(Path(config)) if config else BatchConfig()
        cfg = base.with_overrides(engine=engine, solver=solver_overrides)
        manifest = read_manifest(datasets_txt)
        with progress_ui() if progress else nullcontext() as ui:
            runner = BatchRunner.from_config(cfg, ui=ui)
            tally = runner.run(manifest, Path(output_csv))
    except BatchConfigError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    raise typer.Exit(code=tally.exit_code)


# typer re-exports the click exceptions it raises; newer releases bundle their own click.
_ClickException = next(cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "ClickException")


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point; usage errors exit with 1 like other configuration errors."""
    command = get_command(app)
    try:
        rv = command.main(args=list(argv) if argv is not None else None, prog_name="lp-batch", standalone_mode=False)
    except _ClickException as exc:
        exc.show()
        return EXIT_CONFIG_ERROR
    except typer.Abort:
        typer.echo("Aborted!", err=True)
        return EXIT_CONFIG_ERROR
    return rv if isinstance(rv, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
