"""Installer error hierarchy."""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for fatal installer conditions.

    Each subclass carries the symbolic exit code the run terminates with.
    """

    exit_code = "success"


class UnknownScenarioError(InstallerError):
    """The requested or resolved scenario file does not exist."""

    exit_code = "unknown_scenario"


class ScenarioChangeBlockedError(InstallerError):
    """A scenario change was attempted without confirmation."""

    exit_code = "scenario_error"


class UnknownModuleError(InstallerError):
    """A module toggle names a module the configuration does not know."""

    exit_code = "unknown_module"


class InvalidSystemError(InstallerError):
    """A system check failed."""

    exit_code = "invalid_system"


class InvalidValuesError(InstallerError):
    """One or more parameter values failed validation."""

    exit_code = "invalid_values"


class NoAnswerFileError(InstallerError):
    """The scenario declares no usable answer file."""

    exit_code = "no_answer_file"


class ConfigurationError(InstallerError, ValueError):
    """A scenario, answer or hook file cannot be loaded."""

    exit_code = "defaults_error"


class WizardCancelled(InstallerError):
    """The user cancelled from a wizard. Not a failure."""

    exit_code = "success"

    def __init__(self, message: str = "Installation was cancelled by user"):
        super().__init__(message)


class InstallerExit(Exception):
    """Raised by the exit handler to unwind the run with a numeric code."""

    def __init__(self, code: int):
        super().__init__(f"exit {code}")
        self.code = code
