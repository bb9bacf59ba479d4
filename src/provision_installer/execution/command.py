"""The provisioning command line."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..core.config import Configuration
from ..core.context import RunOptions

PROVISIONING_FLAGS = [
    "--verbose",
    "--debug",
    "--trace",
    "--color=false",
    "--show_diff",
    "--detailed-exitcodes",
]

# --detailed-exitcodes: 0 means no changes, 2 means changes were applied
SUCCESS_EXIT_CODES = (0, 2)


@dataclass
class ProvisioningCommand:
    """Builds the argument vector and environment of the provisioning process."""
    executable: List[str]
    entry: str
    answer_file: Optional[Path] = None
    module_dirs: List[Path] = field(default_factory=list)
    noop: bool = False
    profile: bool = False

    @classmethod
    def from_config(cls, config: Configuration, options: RunOptions, answer_file: Optional[Path] = None) -> ProvisioningCommand:
        return cls(
            executable=list(config.app.command),
            entry=config.app.entry,
            answer_file=answer_file,
            module_dirs=list(config.app.module_dirs),
            noop=options.noop,
            profile=options.profile,
        )

    def argv(self) -> List[str]:
        argv = [*self.executable, "--execute", self.entry, *PROVISIONING_FLAGS]
        if self.module_dirs:
            argv.append("--modulepath=" + os.pathsep.join(str(d) for d in self.module_dirs))
        if self.noop:
            argv.append("--noop")
        if self.profile:
            argv.append("--profile")
        return argv

    def env(self) -> Dict[str, str]:
        env = dict(os.environ)
        if self.answer_file is not None:
            env["INSTALLER_ANSWER_FILE"] = str(self.answer_file)
        return env
