"""Run options and the context object shared by every component of a run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from rich.console import Console

from .config import Configuration
from .exit_handler import ExitHandler
from .hooking import Hooking

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_DIR = Path("/etc/provision-installer/scenarios.d")


@dataclass
class RunOptions:
    """Command line switches consumed by the run."""
    config_dir: Path = DEFAULT_CONFIG_DIR
    scenario: Optional[str] = None
    list_scenarios: bool = False
    force: bool = False
    compare_scenarios: bool = False
    interactive: bool = False
    noop: bool = False
    profile: bool = False
    verbose: bool = False
    verbose_log_level: Optional[str] = None
    skip_checks: bool = False
    dont_save_answers: bool = False
    module_toggles: Dict[str, bool] = field(default_factory=dict)

    def __post_init__(self):
        self.config_dir = Path(self.config_dir)
        # A scenario file may be given in place of its directory
        if self.config_dir.is_file():
            self.config_dir = self.config_dir.parent


@dataclass
class RunContext:
    """Everything one run shares: options, exit handler, console and the loaded configuration."""
    options: RunOptions
    exit_handler: ExitHandler = field(default_factory=ExitHandler)
    console: Console = field(default_factory=Console)
    error_console: Console = field(default_factory=lambda: Console(stderr=True))
    config: Optional[Configuration] = None
    log_handler: Optional[logging.Handler] = None
    console_log_handler: Optional[logging.Handler] = None
    hooking: Hooking = field(default_factory=Hooking)

    def fail(self, message: str) -> None:
        """Print a fatal message for the user and log it."""
        self.error_console.print(f"ERROR: {message}", style="bold red", markup=False, highlight=False)
        logger.error(message)
