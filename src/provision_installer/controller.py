"""Orchestration of one installer run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from rich.markup import escape

from .core.config import Configuration
from .core.context import RunContext
from .core.logs import apply_verbose_log_level, attach_log_file, detach_log_file
from .core.system_checker import SystemChecker
from .errors import InstallerError, InstallerExit, InvalidSystemError, InvalidValuesError, WizardCancelled
from .execution.command import ProvisioningCommand
from .execution.progress import NullProgress, ProgressSink, RichProgressBar
from .execution.runner import ProcessRunner, RunResult
from .scenarios.selector import ScenarioSelector
from .scenarios.store import ScenarioStore
from .scenarios.wizard import RichWizard, Wizard

logger = logging.getLogger(__name__)


class RunController:
    """Runs the installer: scenario selection, confirmation, provisioning, exit.

    :meth:`run` always returns the exit code and always removes the
    temporary files registered with the exit handler.
    """

    def __init__(
        self,
        context: RunContext,
        wizard: Optional[Wizard] = None,
        runner_factory: Callable[[ProgressSink], ProcessRunner] = ProcessRunner,
        checker_factory: Callable[[Iterable[Path]], SystemChecker] = SystemChecker,
    ):
        self.context = context
        self.wizard = wizard or RichWizard(context.console)
        self.runner_factory = runner_factory
        self.checker_factory = checker_factory

    def run(self) -> int:
        exit_handler = self.context.exit_handler
        try:
            self._run()
        except InstallerExit as e:
            return e.code
        except KeyboardInterrupt:
            logger.warning("Installation was interrupted")
            exit_handler.exit_code = 130
            return 130
        finally:
            exit_handler.cleanup()
            detach_log_file(self.context.log_handler)
            self.context.log_handler = None
        return exit_handler.exit_code

    def _run(self) -> None:
        try:
            self._execute()
        except WizardCancelled as e:
            self.context.console.print(str(e))
            logger.info(str(e))
            self.context.exit_handler.exit(e.exit_code)
        except InstallerError as e:
            self.context.fail(str(e))
            self.context.exit_handler.exit(e.exit_code)

    def _use_config(self, config: Configuration) -> Configuration:
        self.context.config = config
        self.context.log_handler = attach_log_file(config, self.context.log_handler)
        options = self.context.options
        if options.verbose and options.verbose_log_level is None:
            apply_verbose_log_level(self.context.console_log_handler, config)
        self.context.hooking.load(config.app.hook_dirs)
        return config

    def _execute(self) -> None:
        options = self.context.options
        exit_handler = self.context.exit_handler
        hooking = self.context.hooking

        store = ScenarioStore(options.config_dir)
        if options.list_scenarios:
            self.list_scenarios(store)
            exit_handler.exit(0)

        selector = ScenarioSelector(self.context, store, self.wizard)
        scenario = selector.select_scenario()
        config = self._use_config(Configuration(scenario))
        hooking.execute("pre_migrations", self.context)

        if selector.check_scenario_change(scenario):
            config = self._use_config(selector.migrate(config))

        hooking.execute("boot", self.context)
        hooking.execute("init", self.context)
        hooking.execute("pre_values", self.context)

        if options.module_toggles:
            config.apply_module_toggles(options.module_toggles)

        if not options.skip_checks:
            if not self.checker_factory(config.app.check_dirs).check():
                raise InvalidSystemError("Your system does not meet configuration criteria")

        hooking.execute("pre_validations", self.context)
        errors = config.validate()
        if errors:
            for message in errors:
                logger.error(message)
            raise InvalidValuesError("Error during configuration, exiting")

        hooking.execute("pre_commit", self.context)
        persistent = not (options.noop or options.dont_save_answers or config.app.dont_save_answers)
        if persistent:
            answer_file = config.store(config.answers_data())
            temp_config_file = None
        else:
            temp_config_file = config.temp_config_file
            exit_handler.register_cleanup_path(temp_config_file)
            answer_file = config.store(config.answers_data(), temp_config_file)

        hooking.execute("pre", self.context)
        command = ProvisioningCommand.from_config(config, options, answer_file)
        runner = self.runner_factory(self._progress(config))
        result = runner.run(command.argv(), command.env(), temp_config_file=temp_config_file)

        if result.success and persistent:
            store.link_last_scenario(scenario)
        exit_handler.exit(result.exit_code, lambda: self._finish(result))

    def _finish(self, result: RunResult) -> None:
        self.context.hooking.execute("post", self.context)
        self._report(result)

    def _progress(self, config: Configuration) -> ProgressSink:
        if self.context.options.verbose:
            return NullProgress()
        return RichProgressBar(colors=config.app.colors)

    def _report(self, result: RunResult) -> None:
        if result.success:
            self.context.console.print("[green]Installation finished successfully[/green]")
            return
        self.context.console.print(
            f"[red]Installation failed with exit code {result.exit_code} "
            f"({len(result.errors)} errors)[/red]"
        )
        if self.context.config is not None:
            self.context.console.print(f"Full log is at {escape(str(self.context.config.log_file))}")

    def list_scenarios(self, store: ScenarioStore) -> None:
        console = self.context.console
        available = store.list_scenarios()
        previous = store.previous_scenario_path

        console.print("[cyan]Available scenarios[/cyan]")
        for path, scenario in available.items():
            use = "INSTALLED" if path == previous else f"use: --scenario {scenario.key}"
            console.print(f"  [bold]{escape(scenario.name)}[/bold] ({escape(use)})")
            if scenario.description:
                console.print(f"        {escape(scenario.description)}")
        if not available:
            console.print(f"  No available scenarios found in {escape(str(store.config_dir))}")
