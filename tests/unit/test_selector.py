"""Unit tests for scenario selection and the scenario change policy."""

import pytest
import yaml

from provision_installer.core.config import Configuration
from provision_installer.errors import (
    InstallerExit,
    ScenarioChangeBlockedError,
    UnknownScenarioError,
    WizardCancelled,
)
from provision_installer.scenarios.selector import ScenarioSelector
from provision_installer.scenarios.store import ScenarioStore
from provision_installer.scenarios.wizard import CANCEL, PROCEED
from tests.mocks import FakeWizard


def make_selector(make_context, config_dir, wizard=None, **options):
    context = make_context(config_dir=config_dir, **options)
    return ScenarioSelector(context, ScenarioStore(config_dir), wizard or FakeWizard())


@pytest.mark.unit
class TestSelectScenario:
    """Test scenario resolution."""

    def test_explicit_scenario(self, make_context, config_dir):
        selector = make_selector(make_context, config_dir, scenario="katello")
        assert selector.select_scenario() == (config_dir / "katello.yaml").resolve()

    def test_explicit_scenario_wins_over_previous(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir, scenario="katello")
        assert selector.select_scenario().name == "katello.yaml"

    def test_unknown_explicit_scenario(self, make_context, config_dir):
        selector = make_selector(make_context, config_dir, scenario="nope")
        with pytest.raises(UnknownScenarioError, match="nope.yaml"):
            selector.select_scenario()

    def test_previous_scenario(self, make_context, config_dir, link_previous):
        link_previous("katello")
        selector = make_selector(make_context, config_dir)
        assert selector.select_scenario() == (config_dir / "katello.yaml").resolve()

    def test_only_available_scenario(self, make_context, single_scenario_dir):
        selector = make_selector(make_context, single_scenario_dir)
        assert selector.select_scenario() == (single_scenario_dir / "legacy.yaml").resolve()

    def test_no_selection_without_interactive(self, make_context, config_dir):
        selector = make_selector(make_context, config_dir)
        with pytest.raises(UnknownScenarioError, match="--list-scenarios"):
            selector.select_scenario()

    def test_interactive_selection(self, make_context, config_dir):
        wizard = FakeWizard([(config_dir / "foreman.yaml").resolve()])
        selector = make_selector(make_context, config_dir, wizard, interactive=True)

        assert selector.select_scenario() == (config_dir / "foreman.yaml").resolve()

        choices = wizard.calls[0]["choices"]
        assert [c.label for c in choices] == [
            "Foreman: Foreman with a smart proxy",
            "Katello: Foreman with content management",
            "Cancel Installation",
        ]
        assert choices[-1].key == CANCEL

    def test_interactive_cancel(self, make_context, config_dir):
        selector = make_selector(make_context, config_dir, FakeWizard([CANCEL]), interactive=True)
        with pytest.raises(WizardCancelled):
            selector.select_scenario()

    def test_resolution_is_idempotent(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir)
        assert selector.select_scenario() == selector.select_scenario()

        again = make_selector(make_context, config_dir)
        assert again.select_scenario() == selector.select_scenario()


@pytest.mark.unit
class TestScenarioChange:
    """Test scenario change detection and confirmation."""

    def test_not_changed_without_previous(self, make_context, config_dir):
        selector = make_selector(make_context, config_dir)
        assert selector.scenario_changed(config_dir / "foreman.yaml") is False
        assert selector.check_scenario_change(config_dir / "foreman.yaml") is False

    def test_not_changed_for_same_scenario(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir)
        assert selector.scenario_changed(config_dir / "foreman.yaml") is False
        assert selector.scenario_changed(config_dir / "last_scenario.yaml") is False

    def test_changed(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir)
        assert selector.scenario_changed(config_dir / "katello.yaml") is True

    def test_force_skips_diff_and_wizard(self, make_context, config_dir, link_previous, mocker):
        link_previous("foreman")
        wizard = FakeWizard()
        selector = make_selector(make_context, config_dir, wizard, force=True, interactive=True)
        show_diff = mocker.spy(selector, "show_scenario_diff")

        selector.confirm_scenario_change(config_dir / "katello.yaml")

        assert show_diff.call_count == 0
        assert wizard.calls == []

    def test_blocked_without_force(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir)

        with pytest.raises(ScenarioChangeBlockedError) as exc_info:
            selector.check_scenario_change(config_dir / "katello.yaml")

        message = str(exc_info.value)
        assert "--force" in message
        assert "--compare-scenarios" in message

    def test_interactive_confirmation_proceeds(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        wizard = FakeWizard([PROCEED])
        selector = make_selector(make_context, config_dir, wizard, interactive=True)

        assert selector.check_scenario_change(config_dir / "katello.yaml") is True

        choices = wizard.calls[0]["choices"]
        assert [c.key for c in choices] == [PROCEED, CANCEL]
        assert [c.key for c in choices if c.default] == [CANCEL]
        assert "Foreman -> Katello" in selector.context.console.export_text()

    def test_interactive_confirmation_cancelled(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir, FakeWizard([CANCEL]), interactive=True)

        with pytest.raises(WizardCancelled):
            selector.check_scenario_change(config_dir / "katello.yaml")

    def test_compare_scenarios_exits_successfully(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir, compare_scenarios=True, force=True)

        with pytest.raises(InstallerExit) as exc_info:
            selector.check_scenario_change(config_dir / "katello.yaml")

        assert exc_info.value.code == 0
        output = selector.context.console.export_text()
        assert "Scenarios are being compared" in output
        assert "Values from previous installation that will be lost" in output


@pytest.mark.unit
class TestMigration:
    """Test carrying the previous scenario into the new one."""

    def test_migrate(self, make_context, config_dir, link_previous, tmp_path):
        link_previous("foreman")
        selector = make_selector(make_context, config_dir, force=True)
        config = Configuration(config_dir / "katello.yaml")

        migrated = selector.migrate(config)

        assert migrated is not config
        assert migrated.app.log_dir == tmp_path / "log" / "foreman"
        assert migrated.app.log_name == "katello.log"
        assert migrated.param("foreman", "admin_password").value == "secret"
        assert migrated.param("katello", "cdn").value == "https://cdn.example.com"

        saved = yaml.safe_load((config_dir / "katello.yaml").read_text())
        assert saved["log_level"] == "DEBUG"
        assert "log_name" in saved and saved["log_name"] == "katello.log"

    def test_migrate_keeps_explicit_answers(self, make_context, config_dir, link_previous):
        link_previous("foreman")
        (config_dir / "katello-answers.yaml").write_text(
            yaml.safe_dump({"foreman": {"admin_password": "mine"}, "katello": True})
        )
        selector = make_selector(make_context, config_dir, force=True)

        migrated = selector.migrate(Configuration(config_dir / "katello.yaml"))

        assert migrated.param("foreman", "admin_password").value == "mine"
