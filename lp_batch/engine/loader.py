from __future__ import annotations

import importlib
import logging
from typing import Callable

from lp_batch.batch.errors import EngineLoadError
from lp_batch.engine.interfaces import SolverEngine

logger = logging.getLogger(__name__)


def _scipy_engine() -> SolverEngine:
    from lp_batch.engine.scipy_engine import ScipyLinprogEngine

    return ScipyLinprogEngine()


BUILTIN_ENGINES: dict[str, Callable[[], SolverEngine]] = {
    "scipy": _scipy_engine,
}


def load_engine(name: str) -> SolverEngine:
    """Build an engine from a built-in name or a 'package.module:factory' reference.

    The factory is called without arguments; classes work as factories.
    """
    key = name.strip()
    if key.lower() in BUILTIN_ENGINES:
        return BUILTIN_ENGINES[key.lower()]()

    if ":" not in key:
        known = ", ".join(sorted(BUILTIN_ENGINES))
        raise EngineLoadError(f"Unknown engine '{name}'. Use one of: {known}, or 'package.module:factory'.")

    module_name, attr = key.split(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise EngineLoadError(f"Cannot import engine module '{module_name}': {exc}") from exc

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise EngineLoadError(f"Engine factory '{attr}' not found in module '{module_name}'")

    try:
        engine = factory()
    except Exception as exc:
        raise EngineLoadError(f"Engine factory '{name}' failed: {exc}") from exc
    for op in ("parse_dataset", "solve", "release"):
        if not callable(getattr(engine, op, None)):
            raise EngineLoadError(f"Engine '{name}' does not implement {op}()")
    logger.debug("Loaded engine %s", name)
    return engine
