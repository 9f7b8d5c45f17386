from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass(frozen=True)
class Ui:
    console: Console
    progress: Progress

    def start_batch(self, total: int) -> TaskID:
        return self.progress.add_task("Solving datasets", total=total, instance="")

    def dataset_done(self, task: TaskID, instance: str, status: str) -> None:
        self.progress.update(task, advance=1, instance=f"{instance}: {status}")


@contextmanager
def progress_ui(console: Console | None = None) -> Iterator[Ui]:
    # stderr keeps the progress display out of redirected stdout.
    console = console or Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TextColumn("{task.fields[instance]}", markup=False),
        console=console,
        transient=False,
    )
    with progress:
        yield Ui(console=console, progress=progress)
