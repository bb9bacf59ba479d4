"""Execution of the provisioning process."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from .child import ChildProcess, ReapState
from .classify import ClassifiedLine, Severity, classify_line
from .command import SUCCESS_EXIT_CODES
from .progress import NullProgress, ProgressSink

logger = logging.getLogger(__name__)

# Provisioning output is logged under its own name
provisioning_logger = logging.getLogger("provision_installer.provisioning")

SpawnFunc = Callable[[Sequence[str], Optional[Mapping[str, str]]], ChildProcess]


@dataclass
class RunResult:
    """Outcome of one provisioning run."""
    exit_code: int = 0
    lines: List[ClassifiedLine] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.exit_code in SUCCESS_EXIT_CODES

    @property
    def errors(self) -> List[str]:
        return [line.message for line in self.lines if line.severity is Severity.ERROR]


class ProcessRunner:
    """Runs the provisioning command once and reports what it printed.

    A failed run is reported, never retried.
    """

    def __init__(self, progress: Optional[ProgressSink] = None, spawn: SpawnFunc = ChildProcess.spawn):
        self.progress = progress or NullProgress()
        self.spawn = spawn

    def _forward(self, line: ClassifiedLine) -> None:
        if line.severity is Severity.ERROR:
            self.progress.print_error(line.message)
        provisioning_logger.log(line.severity.log_level, line.message)

    def _exit_code(self, child: ChildProcess) -> Optional[int]:
        result = child.poll()
        if result.state is ReapState.PENDING:
            result = child.wait()
        if result.state is ReapState.CONSUMED:
            logger.debug(f"Exit status of pid {child.pid} was collected elsewhere")
        return result.exit_code

    def run(
        self,
        argv: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        temp_config_file: Optional[Path] = None,
    ) -> RunResult:
        """Spawn ``argv``, stream and classify its output, and return its exit code.

        Output is drained completely before the exit status is collected.
        The progress sink is closed and ``temp_config_file`` removed however
        the run ends.
        """
        result = RunResult()
        child: Optional[ChildProcess] = None
        logger.info(f"Running {' '.join(argv)}")

        try:
            child = self.spawn(argv, env)
            for raw in child.lines():
                line = classify_line(raw)
                result.lines.append(line)
                self._forward(line)
                self.progress.update(raw)

            exit_code = self._exit_code(child)
            if exit_code is not None:
                result.exit_code = exit_code
        finally:
            if child is not None:
                child.close()
            self.progress.close()
            logger.info("Provisioning has finished, bye!")
            if temp_config_file is not None:
                Path(temp_config_file).unlink(missing_ok=True)

        logger.info(f"Provisioning exited with code {result.exit_code}")
        return result
