"""Scenario discovery, comparison and selection."""

from .models import Scenario
from .store import ScenarioStore, LAST_SCENARIO_LINK
from .diff import ModuleStatus, ScenarioDiff, diff, render_diff
from .selector import ScenarioSelector
from .wizard import RichWizard, Wizard, WizardChoice

__all__ = [
    "Scenario",
    "ScenarioStore",
    "LAST_SCENARIO_LINK",
    "ModuleStatus",
    "ScenarioDiff",
    "diff",
    "render_diff",
    "ScenarioSelector",
    "RichWizard",
    "Wizard",
    "WizardChoice",
]
