"""User hooks executed at fixed stages of a run.

A hook directory holds one subdirectory per stage, each with ``*.py`` files
defining ``hook(context)``::

    hooks/
        pre/
            10_stop_services.py
        post/
            10_report.py

Hooks of a stage run in file name order. A hook loaded later under the
same name replaces the earlier one.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Iterable

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from .context import RunContext

logger = logging.getLogger(__name__)


HOOK_STAGES = (
    "pre_migrations",
    "boot",
    "init",
    "pre_values",
    "pre_validations",
    "pre_commit",
    "pre",
    "post",
)

HookFunc = Callable[["RunContext"], None]


class Hooking:
    """Registry of hooks per stage."""

    def __init__(self):
        self.hooks: Dict[str, Dict[str, HookFunc]] = {stage: {} for stage in HOOK_STAGES}

    def _check_stage(self, stage: str) -> None:
        if stage not in HOOK_STAGES:
            raise ValueError(f"Unknown hook stage: {stage}")

    def register(self, stage: str, name: str, func: HookFunc) -> None:
        self._check_stage(stage)
        self.hooks[stage][name] = func

    def load(self, hook_dirs: Iterable[Path]) -> None:
        """Load hook files from ``hook_dirs``. Missing directories are skipped."""
        for hook_dir in hook_dirs:
            hook_dir = Path(hook_dir)
            if not hook_dir.is_dir():
                logger.debug(f"Hook directory {hook_dir} does not exist, skipping")
                continue
            for stage in HOOK_STAGES:
                for path in sorted((hook_dir / stage).glob("*.py")):
                    self.register(stage, path.stem, self._load_file(stage, path))

    def _load_file(self, stage: str, path: Path) -> HookFunc:
        spec = importlib.util.spec_from_file_location(f"provision_installer_hooks.{stage}.{path.stem}", path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot load hook file {path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ConfigurationError(f"Failed to load hook file {path}: {e}") from e

        func = getattr(module, "hook", None)
        if not callable(func):
            raise ConfigurationError(f"Hook file {path} does not define hook(context)")
        logger.debug(f"Loaded {stage} hook {path}")
        return func

    def execute(self, stage: str, context: RunContext) -> None:
        self._check_stage(stage)
        hooks = self.hooks[stage]
        if not hooks:
            return

        logger.debug(f"Executing hooks in group {stage}")
        for name in sorted(hooks):
            logger.debug(f"Running {stage} hook {name}")
            hooks[name](context)
        logger.debug(f"All hooks in group {stage} finished")
