"""Scenario discovery and the last-used scenario pointer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import yaml

from .models import Scenario

logger = logging.getLogger(__name__)


LAST_SCENARIO_LINK = "last_scenario.yaml"


class ScenarioStore:
    """Finds scenario definitions in a configuration directory.

    Any ``*.yaml`` file in the directory that declares an ``answer_file`` is
    a scenario. The pointer file ``last_scenario.yaml`` is a symlink to the
    scenario used by the last successful run.
    """

    def __init__(self, config_dir: Path, last_scenario_link_name: str = LAST_SCENARIO_LINK):
        """Initialize scenario store."""
        self.config_dir = Path(config_dir)
        self.last_scenario_link = self.config_dir / last_scenario_link_name

    def load_scenario(self, scenario_path: Path) -> Optional[Scenario]:
        """Load a scenario file. Returns None when the file is not a scenario."""
        with open(scenario_path, 'rb') as f:
            content = yaml.safe_load(f)

        if not isinstance(content, dict) or "answer_file" not in content:
            logger.debug(f"{scenario_path} is not a scenario definition")
            return None
        return Scenario.from_data(Path(scenario_path), content)

    def list_scenarios(self) -> Dict[Path, Scenario]:
        """Map of resolved scenario path to scenario, sorted by file name."""
        scenarios: Dict[Path, Scenario] = {}
        if not self.config_dir.is_dir():
            logger.warning(f"Scenario directory {self.config_dir} does not exist")
            return scenarios

        for file_path in sorted(self.config_dir.glob("*.yaml")):
            if file_path.name == self.last_scenario_link.name:
                continue
            try:
                scenario = self.load_scenario(file_path)
            except (yaml.YAMLError, OSError, ValueError) as e:
                logger.warning(f"Skipping malformed scenario file {file_path}: {e}")
                continue
            if scenario is not None:
                scenarios[scenario.source_path] = scenario

        logger.debug(f"Found {len(scenarios)} scenarios in {self.config_dir}")
        return scenarios

    def scenario_path_for(self, name: str) -> Path:
        """Path of the scenario file selected with ``--scenario NAME``."""
        return self.config_dir / f"{name}.yaml"

    def previous_scenario(self) -> Optional[Scenario]:
        """Scenario the pointer refers to, or None when absent, dangling or unreadable."""
        if not self.last_scenario_link.is_symlink() and not self.last_scenario_link.exists():
            return None

        try:
            target = self.last_scenario_link.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            logger.warning(f"Ignoring broken scenario pointer {self.last_scenario_link}: {e}")
            return None

        try:
            return self.load_scenario(target)
        except (yaml.YAMLError, OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable previous scenario {target}: {e}")
            return None

    @property
    def previous_scenario_path(self) -> Optional[Path]:
        previous = self.previous_scenario()
        return previous.source_path if previous else None

    def link_last_scenario(self, scenario_path: Path) -> None:
        """Point ``last_scenario.yaml`` at ``scenario_path``, replacing any old pointer atomically."""
        target = Path(scenario_path).resolve()
        temp_link = self.config_dir / f".{self.last_scenario_link.name}.{os.getpid()}.tmp"

        if temp_link.is_symlink() or temp_link.exists():
            temp_link.unlink()
        os.symlink(target, temp_link)
        os.replace(temp_link, self.last_scenario_link)
        logger.info(f"Scenario {target} recorded as last used scenario")
