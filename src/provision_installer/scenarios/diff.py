"""Comparison of two scenario configurations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from ..core.config import Configuration, Parameter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleStatus:
    """Enabled state of a module before and after a scenario change. None means absent."""
    previous: Optional[bool]
    new: Optional[bool]

    @property
    def changed(self) -> bool:
        return self.previous != self.new

    @property
    def highlighted(self) -> bool:
        """Module goes from enabled to disabled or absent."""
        return self.previous is True and not self.new


@dataclass
class ScenarioDiff:
    """Differences between a previous and a current configuration."""
    missing: List[Parameter] = field(default_factory=list)
    changed: List[Tuple[Parameter, Any]] = field(default_factory=list)
    modules: Dict[str, ModuleStatus] = field(default_factory=dict)

    @property
    def module_changes(self) -> Dict[str, ModuleStatus]:
        return {name: status for name, status in self.modules.items() if status.changed}

    def is_empty(self) -> bool:
        return not self.missing and not self.changed and not self.module_changes


def _index(config: Configuration) -> Dict[Tuple[str, str], Parameter]:
    # later duplicates overwrite earlier ones
    index: Dict[Tuple[str, str], Parameter] = {}
    for mod in config.modules:
        for param in mod.params:
            index[(mod.name, param.name)] = param
    return index


def diff(previous: Configuration, current: Configuration) -> ScenarioDiff:
    """Compare ``previous`` against ``current`` without modifying either.

    ``missing`` holds set values of enabled modules in ``previous`` that
    ``current`` has no parameter for. ``changed`` holds parameters of
    enabled modules in ``current`` whose value differs from ``previous``,
    paired with the previous value.
    """
    previous_params = _index(previous)
    current_params = _index(current)
    previous_enabled = {mod.name: mod.enabled for mod in previous.modules}
    current_enabled = {mod.name: mod.enabled for mod in current.modules}

    result = ScenarioDiff()

    for (module_name, param_name), param in previous_params.items():
        if not previous_enabled.get(module_name) or param.value is None:
            continue
        if (module_name, param_name) not in current_params:
            result.missing.append(param)

    for (module_name, param_name), param in current_params.items():
        if not current_enabled.get(module_name):
            continue
        old = previous_params.get((module_name, param_name))
        if old is not None and old.value != param.value:
            result.changed.append((param, old.value))

    for name in list(previous_enabled) + [n for n in current_enabled if n not in previous_enabled]:
        result.modules[name] = ModuleStatus(previous_enabled.get(name), current_enabled.get(name))

    logger.debug(
        f"Scenario diff: {len(result.missing)} missing, {len(result.changed)} changed, "
        f"{len(result.module_changes)} module changes"
    )
    return result


_PRINTABLE_STATUS = {None: "N/A", True: "ENABLED", False: "DISABLED"}


def render_diff(result: ScenarioDiff, console: Console, previous_name: str, new_name: str) -> None:
    """Print a scenario diff for the user."""
    table = Table(
        title=f"Overview of modules used in the scenarios ({previous_name} -> {new_name})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Module")
    table.add_column(previous_name)
    table.add_column(new_name)
    for name, status in result.modules.items():
        style = "bold red" if status.highlighted else None
        table.add_row(name, _PRINTABLE_STATUS[status.previous], _PRINTABLE_STATUS[status.new], style=style)
    console.print(table)

    console.print("\n[bold]Defaults that will be updated with values from previous installation:[/bold]")
    if not result.changed:
        console.print("  No values will be updated from previous scenario")
    for param, previous_value in result.changed:
        console.print(f"  {param.identifier}: {param.value!r} -> {previous_value!r}", markup=False)

    console.print("\n[bold]Values from previous installation that will be lost by scenario change:[/bold]")
    if not result.missing:
        console.print("  No values from previous installation will be lost")
    for param in result.missing:
        console.print(f"  {param.identifier}: {param.value!r}", markup=False)
