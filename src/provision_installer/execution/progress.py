"""Progress reporting while provisioning runs."""

from __future__ import annotations

import re
from typing import Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn


class ProgressSink(Protocol):
    def update(self, line: str) -> None:
        ...

    def print_error(self, message: str) -> None:
        ...

    def close(self) -> None:
        ...


class NullProgress:
    """Used in verbose mode, where the log itself goes to the console."""

    def update(self, line: str) -> None:
        pass

    def print_error(self, message: str) -> None:
        pass

    def close(self) -> None:
        pass


class RichProgressBar:
    """Progress bar driven by the resource evaluation trace of the provisioning output."""

    MONITOR_RESOURCE = re.compile(r"\w*MONITOR_RESOURCE ([^\]]+\])")
    EVALTRACE_START = re.compile(r"/(.+\]): Starting to evaluate the resource")
    EVALTRACE_END = re.compile(r"/(.+\]): Evaluated in [\d.]+ seconds")

    def __init__(self, console: Optional[Console] = None, colors: bool = True):
        self.console = console or Console(no_color=not colors)
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.fields[resources]}"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self.task_id: Optional[TaskID] = None
        self.total = 0
        self.done = 0

    def _start(self) -> TaskID:
        if self.task_id is None:
            self.progress.start()
            self.task_id = self.progress.add_task("Preparing installation", total=None, resources="?")
        return self.task_id

    def update(self, line: str) -> None:
        task_id = self._start()

        monitor = self.MONITOR_RESOURCE.search(line)
        if monitor:
            self.total += 1
            self.progress.update(task_id, total=self.total, resources=self.total)
            return

        start = self.EVALTRACE_START.search(line)
        if start:
            self.progress.update(task_id, description=escape(start.group(1))[:60])
            return

        end = self.EVALTRACE_END.search(line)
        if end and self.done < self.total:
            self.done += 1
            self.progress.update(task_id, completed=self.done)

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]")

    def close(self) -> None:
        if self.task_id is None:
            return
        if self.total:
            self.progress.update(self.task_id, completed=self.total, description="Done")
        self.progress.stop()
