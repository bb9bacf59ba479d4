"""Pre-flight system checks."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


class SystemChecker:
    """Runs every executable found in the check directories."""

    def __init__(self, check_dirs: Iterable[Path]):
        self.check_dirs = [Path(d) for d in check_dirs]

    def checkers(self) -> List[Path]:
        found = []
        for directory in self.check_dirs:
            if not directory.is_dir():
                logger.debug(f"Check directory {directory} does not exist, skipping")
                continue
            for path in sorted(directory.iterdir()):
                if path.is_file() and os.access(path, os.X_OK):
                    found.append(path)
        return found

    def check(self) -> bool:
        """Return True when every checker exits with status 0."""
        logger.info("Running system checks")
        ok = True
        for checker in self.checkers():
            logger.debug(f"Running check {checker}")
            result = subprocess.run(
                [str(checker)],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
            output = result.stdout.strip()
            if result.returncode != 0:
                logger.error(f"Check {checker.name} failed ({result.returncode}): {output}")
                ok = False
            elif output:
                logger.debug(f"Check {checker.name}: {output}")
        return ok
