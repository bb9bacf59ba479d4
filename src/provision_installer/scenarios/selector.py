"""Selection of the active scenario and scenario change policy."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..core.config import Configuration
from ..core.context import RunContext
from ..errors import ScenarioChangeBlockedError, UnknownScenarioError, WizardCancelled
from .diff import ScenarioDiff, diff, render_diff
from .store import ScenarioStore
from .wizard import CANCEL, PROCEED, Wizard, WizardChoice

logger = logging.getLogger(__name__)


# App settings never carried over from the previous scenario
MIGRATION_SKIP = ("log_name",)

CHANGE_WARNING = (
    "You are trying to replace existing installation with different scenario. "
    "This may lead to unpredictable states."
)


class ScenarioSelector:
    """Chooses the scenario for a run and guards scenario changes.

    The previous scenario pointer is read once, when the selector is
    created, so every decision in a run sees the same previous scenario.
    """

    def __init__(self, context: RunContext, store: ScenarioStore, wizard: Wizard):
        self.context = context
        self.options = context.options
        self.store = store
        self.wizard = wizard
        self.previous_scenario_path: Optional[Path] = store.previous_scenario_path

    def scenario_from_args(self) -> Optional[Path]:
        """Scenario named with ``--scenario``; its file must exist."""
        if not self.options.scenario:
            return None

        scenario_file = self.store.scenario_path_for(self.options.scenario)
        if not scenario_file.is_file():
            raise UnknownScenarioError(f"Scenario ({scenario_file}) was not found, can not continue")
        return scenario_file.resolve()

    def select_scenario_interactively(self) -> Optional[Path]:
        """Ask the user to pick a scenario. Only in interactive mode."""
        if not self.options.interactive:
            return None

        available = self.store.list_scenarios()
        if not available:
            return None

        choices = []
        for path, scenario in available.items():
            label = scenario.name
            if scenario.description:
                label += f": {scenario.description}"
            choices.append(WizardChoice(path, label, default=True))
        choices.append(WizardChoice(CANCEL, "Cancel Installation", default=False))

        result = self.wizard.choose(
            "Select installation scenario",
            "Please select one of the pre-set installation scenarios. "
            "You can customize your setup later during the installation.",
            choices,
        )
        if result == CANCEL:
            raise WizardCancelled()
        return Path(result)

    def select_scenario(self) -> Path:
        """Resolve the scenario for this run.

        Order: ``--scenario`` argument, previous scenario, the only
        available scenario, interactive selection.
        """
        scenario = self.scenario_from_args() or self.previous_scenario_path
        if scenario is None:
            available = self.store.list_scenarios()
            if len(available) == 1:
                scenario = next(iter(available))
            else:
                scenario = self.select_scenario_interactively()

        if scenario is None:
            raise UnknownScenarioError(
                "Scenario was not selected, can not continue. "
                "Use --list-scenarios to list available options."
            )

        logger.debug(f"Selected scenario {scenario}")
        return Path(scenario).resolve()

    def scenario_changed(self, scenario: Path) -> bool:
        """True when a previous scenario exists and differs from ``scenario``."""
        if self.previous_scenario_path is None:
            return False
        return Path(scenario).resolve() != self.previous_scenario_path

    def load_and_setup_configuration(self, config_file: Path) -> Configuration:
        """Load a configuration with its defaults applied."""
        return Configuration(config_file)

    def show_scenario_diff(self, previous_scenario: Path, new_scenario: Path) -> ScenarioDiff:
        console = self.context.console
        console.print("[cyan]Scenarios are being compared, that may take a while...[/cyan]")
        previous_config = self.load_and_setup_configuration(previous_scenario)
        new_config = self.load_and_setup_configuration(new_scenario)
        result = diff(previous_config, new_config)
        render_diff(result, console, previous_config.app.name, new_config.app.name)
        return result

    def check_scenario_change(self, scenario: Path) -> bool:
        """Apply the scenario change policy. Returns True when the scenario changed.

        With ``--compare-scenarios`` the diff is shown and the run ends
        successfully without provisioning.
        """
        if not self.scenario_changed(scenario):
            return False

        if self.options.compare_scenarios:
            self.show_scenario_diff(self.previous_scenario_path, scenario)
            self.context.exit_handler.exit(0)

        self.confirm_scenario_change(scenario)
        logger.info(f"Scenario {scenario} was selected")
        return True

    def confirm_scenario_change(self, new_scenario: Path) -> None:
        """Require ``--force`` or interactive confirmation for a scenario change."""
        if self.options.force:
            return

        if not self.options.interactive:
            raise ScenarioChangeBlockedError(
                f"{CHANGE_WARNING} Use --force to override. "
                "You can use --compare-scenarios to see the differences"
            )

        self.show_scenario_diff(self.previous_scenario_path, new_scenario)
        result = self.wizard.choose(
            "Confirm installation scenario selection",
            f"{CHANGE_WARNING} Please confirm that you want to proceed.",
            [
                WizardChoice(PROCEED, "Proceed with selected installation scenario", default=False),
                WizardChoice(CANCEL, "Cancel Installation", default=True),
            ],
        )
        if result == CANCEL:
            raise WizardCancelled()

    def migrate(self, config: Configuration) -> Configuration:
        """Carry settings and values of the previous scenario into ``config``.

        Returns the new configuration reloaded from disk. Values the new
        scenario's answer file sets explicitly are kept.
        """
        previous_config = self.load_and_setup_configuration(self.previous_scenario_path)
        config.migrate_configuration(previous_config, skip=MIGRATION_SKIP)

        reloaded = self.load_and_setup_configuration(config.config_file)
        reloaded.preset_defaults_from_other_config(previous_config)
        logger.info(
            f"Due to scenario change the configuration ({config.config_file}) "
            f"was updated with {self.previous_scenario_path} and reloaded."
        )
        return reloaded
