"""Installer front-end: scenario selection and provisioning runs."""

__version__ = "0.1.0"

from .controller import RunController
from .core import Configuration, RunContext, RunOptions
from .errors import (
    InstallerError,
    InstallerExit,
    ScenarioChangeBlockedError,
    UnknownScenarioError,
    WizardCancelled,
)

__all__ = [
    "RunController",
    "Configuration",
    "RunContext",
    "RunOptions",
    "InstallerError",
    "InstallerExit",
    "ScenarioChangeBlockedError",
    "UnknownScenarioError",
    "WizardCancelled",
]
