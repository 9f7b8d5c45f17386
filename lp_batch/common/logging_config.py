from __future__ import annotations

import logging
from pathlib import Path
from typing import Final


DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Configure standard library logging for the batch CLI.

    Records go to stderr, and to `log_file` as well when one is given.
    Long unattended runs should keep a log file next to the results table.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, handlers=handlers)
