"""
Provisioning installer CLI

Main entry point for the provision-installer command-line tool.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import typer

from ..controller import RunController
from ..core.context import DEFAULT_CONFIG_DIR, RunContext, RunOptions
from ..core.logs import LOG_FORMAT

app = typer.Typer(
    name="provision-installer",
    help="Select an installation scenario and run the provisioning process",
    add_completion=False,
)


def _configure_logging(verbose: bool, verbose_log_level: Optional[str]) -> logging.Handler:
    """Configure console logging.

    In verbose mode the log, provisioning output included, goes to stderr.
    Otherwise only installer errors do and the progress bar shows the rest.
    Without an explicit level the scenario's ``verbose_log_level`` applies
    once it is loaded.
    """
    if verbose:
        level = getattr(logging, (verbose_log_level or "INFO").upper(), logging.INFO)
    else:
        level = logging.ERROR

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    console.setLevel(level)
    if not verbose:
        console.addFilter(lambda record: not record.name.startswith("provision_installer.provisioning"))

    # File handlers attached later decide their own level
    logging.basicConfig(level=logging.DEBUG, handlers=[console])
    return console


def _module_toggles(enable: Optional[List[str]], disable: Optional[List[str]]) -> Dict[str, bool]:
    toggles: Dict[str, bool] = {}
    for name in enable or []:
        toggles[name] = True
    for name in disable or []:
        toggles[name] = False
    return toggles


def _get_version() -> str:
    """Get package version."""
    try:
        import importlib.metadata
        return importlib.metadata.version("provision-installer")
    except Exception:
        # Fallback version if package metadata is not available
        return "0.1.0"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"provision-installer {_get_version()}")
        raise typer.Exit()


@app.command()
def main(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR, "--config-dir", "-c", envvar="INSTALLER_CONFIG_DIR",
        help="Directory with scenario definitions (or a scenario file in it)",
    ),
    scenario: Optional[str] = typer.Option(None, "--scenario", "-S", help="Use installation scenario"),
    list_scenarios: bool = typer.Option(False, "--list-scenarios", help="List available installation scenarios"),
    force: bool = typer.Option(False, "--force", help="Force change of installation scenario"),
    compare_scenarios: bool = typer.Option(
        False, "--compare-scenarios",
        help="Show changes between last used scenario and the scenario specified with -S or --scenario argument",
    ),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Run in interactive mode"),
    noop: bool = typer.Option(False, "--noop", "-n", help="Run provisioning in noop mode"),
    profile: bool = typer.Option(False, "--profile", "-p", help="Run provisioning in profile mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Display log on STDOUT instead of progressbar"),
    verbose_log_level: Optional[str] = typer.Option(
        None, "--verbose-log-level", "-l", help="Log level for verbose mode output (default: from the scenario)",
    ),
    skip_checks: bool = typer.Option(False, "--skip-checks-i-know-better", "-s", help="Skip all system checks"),
    dont_save_answers: bool = typer.Option(False, "--dont-save-answers", "-d", help="Skip saving answers"),
    enable_module: Optional[List[str]] = typer.Option(None, "--enable-module", help="Enable a module (repeatable)"),
    disable_module: Optional[List[str]] = typer.Option(None, "--disable-module", help="Disable a module (repeatable)"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Display version information",
    ),
):
    """Run the installer."""
    console_log_handler = _configure_logging(verbose, verbose_log_level)

    options = RunOptions(
        config_dir=config_dir,
        scenario=scenario,
        list_scenarios=list_scenarios,
        force=force,
        compare_scenarios=compare_scenarios,
        interactive=interactive,
        noop=noop,
        profile=profile,
        verbose=verbose,
        verbose_log_level=verbose_log_level,
        skip_checks=skip_checks,
        dont_save_answers=dont_save_answers,
        module_toggles=_module_toggles(enable_module, disable_module),
    )

    try:
        exit_code = RunController(RunContext(options=options, console_log_handler=console_log_handler)).run()
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
