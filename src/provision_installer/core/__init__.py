"""Core components: configuration, run context and exit handling."""

from .config import (
    AppConfig,
    Configuration,
    Module,
    Parameter,
    MIGRATED_KEYS,
)
from .context import RunContext, RunOptions, DEFAULT_CONFIG_DIR
from .exit_handler import ExitHandler, EXIT_CODES
from .hooking import Hooking, HOOK_STAGES
from .system_checker import SystemChecker

__all__ = [
    # Configuration
    "AppConfig",
    "Configuration",
    "Module",
    "Parameter",
    "MIGRATED_KEYS",

    # Run context
    "RunContext",
    "RunOptions",
    "DEFAULT_CONFIG_DIR",

    # Exit handling
    "ExitHandler",
    "EXIT_CODES",

    # Hooks
    "Hooking",
    "HOOK_STAGES",

    # Checks
    "SystemChecker",
]
