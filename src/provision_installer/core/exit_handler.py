"""Single exit point for a run: exit code translation and cleanup."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..errors import InstallerExit

logger = logging.getLogger(__name__)


EXIT_CODES: Dict[str, int] = {
    "success": 0,
    "invalid_system": 20,
    "invalid_values": 21,
    "manifest_error": 22,
    "no_answer_file": 25,
    "unknown_module": 26,
    "defaults_error": 27,
    "scenario_error": 30,
    "unknown_scenario": 31,
}


class ExitHandler:
    """Records the exit code of a run and removes registered temporary paths."""

    def __init__(self):
        self.exit_code = 0
        self.cleanup_paths: List[Path] = []

    @staticmethod
    def translate_exit_code(code: Union[int, str]) -> int:
        """Translate a symbolic exit code to its numeric value."""
        if isinstance(code, bool):
            raise ValueError(f"Invalid exit code: {code!r}")
        if isinstance(code, int):
            return code
        if code not in EXIT_CODES:
            raise ValueError(f"Unknown exit code: {code}")
        return EXIT_CODES[code]

    def register_cleanup_path(self, path: Union[str, Path]) -> None:
        """Schedule a file or directory for removal when the run ends."""
        path = Path(path)
        if path not in self.cleanup_paths:
            self.cleanup_paths.append(path)

    def cleanup(self) -> None:
        """Remove every registered path. Missing paths are ignored."""
        for path in self.cleanup_paths:
            logger.debug(f"Cleaning {path}")
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path, ignore_errors=True)
            else:
                path.unlink(missing_ok=True)

    def exit(self, code: Union[int, str], hook: Optional[Callable[[], None]] = None) -> None:
        """Terminate the run with ``code``.

        Runs ``hook`` first, then cleanup, then raises :class:`InstallerExit`.
        """
        self.exit_code = self.translate_exit_code(code)
        if hook is not None:
            hook()
        logger.debug(f"Exit with status code: {self.exit_code} (signal was {code})")
        self.cleanup()
        raise InstallerExit(self.exit_code)
