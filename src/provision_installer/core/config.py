# src/provision_installer/core/config.py
"""Scenario configuration parsing, answers and validation."""

from __future__ import annotations

import copy
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..errors import ConfigurationError, NoAnswerFileError, UnknownModuleError

logger = logging.getLogger(__name__)


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
PARAM_TYPES = ["string", "integer", "boolean", "array", "hash", "any"]

# App settings carried over from the previous scenario on a scenario change
MIGRATED_KEYS = ("log_dir", "log_name", "log_level", "verbose_log_level", "colors", "custom")

DEFAULT_COMMAND = ["puppet", "apply"]
DEFAULT_ENTRY = "include installer_configure"


def _matches_type(value: Any, type_name: str) -> bool:
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "array":
        return isinstance(value, list)
    if type_name == "hash":
        return isinstance(value, dict)
    return True


@dataclass
class AppConfig:
    """Installer settings declared at the top level of a scenario file."""
    name: str = ""
    description: str = ""
    answer_file: Optional[Path] = None
    log_dir: Path = Path("/var/log/provision-installer")
    log_name: str = "provision-installer.log"
    log_level: str = "INFO"
    verbose_log_level: str = "INFO"
    colors: bool = True
    dont_save_answers: bool = False
    check_dirs: List[Path] = field(default_factory=list)
    module_dirs: List[Path] = field(default_factory=list)
    hook_dirs: List[Path] = field(default_factory=list)
    command: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    entry: str = DEFAULT_ENTRY
    custom: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate app settings."""
        if not self.name:
            raise ValueError("Scenario name cannot be empty")

        if not self.log_name:
            raise ValueError("log_name cannot be empty")

        for level_name, level in (("log_level", self.log_level), ("verbose_log_level", self.verbose_log_level)):
            if level not in VALID_LOG_LEVELS:
                raise ValueError(f"Invalid {level_name}: {level}")

        if not self.command or not all(isinstance(part, str) for part in self.command):
            raise ValueError(f"command must be a non-empty list of strings: {self.command}")

        if not isinstance(self.custom, dict):
            raise ValueError("custom must be a dictionary")


@dataclass
class Parameter:
    """Single module parameter."""
    module: str
    name: str
    default: Any = None
    value: Any = None
    doc: Optional[str] = None
    type: str = "any"
    multivalued: bool = False
    answered: bool = False

    @property
    def identifier(self) -> str:
        return f"{self.module}::{self.name}"

    def validate(self) -> Optional[str]:
        """Return an error message when the value does not fit the declared type."""
        if self.type not in PARAM_TYPES:
            return f"Parameter {self.identifier} has unknown type '{self.type}'"
        if self.value is None:
            return None

        if self.multivalued:
            if not isinstance(self.value, list):
                return f"Parameter {self.identifier} must be a list, got {self.value!r}"
            bad = [item for item in self.value if not _matches_type(item, self.type)]
            if bad and self.type != "array":
                return f"Parameter {self.identifier} items must be {self.type}: {bad!r}"
            return None

        if not _matches_type(self.value, self.type):
            return f"Parameter {self.identifier} must be {self.type}, got {self.value!r}"
        return None


@dataclass
class Module:
    """Provisioning module with its ordered parameters."""
    name: str
    enabled: bool = True
    params: List[Parameter] = field(default_factory=list)

    def param(self, name: str) -> Optional[Parameter]:
        found = None
        for param in self.params:
            if param.name == name:
                found = param
        return found

    def params_hash(self) -> Dict[str, Any]:
        return {param.name: copy.deepcopy(param.value) for param in self.params}


class Configuration:
    """One scenario's configuration: app settings plus modules from its answer file."""

    def __init__(self, config_file: Path):
        """Load configuration from ``config_file``."""
        self.config_file = Path(config_file)
        self.data: Dict[str, Any] = {}
        self.app = AppConfig()
        self._env_overrides: Dict[str, Any] = {}
        self._modules: Optional[List[Module]] = None
        self._temp_config_file: Optional[Path] = None

        self.load()

    def load(self) -> None:
        """Load configuration from file."""
        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from {self.config_file}")

        try:
            with open(self.config_file, 'rb') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML configuration: {e}")
            raise ConfigurationError(f"Failed to parse configuration {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {self.config_file}")

        self.data = data
        self._merge_env_vars()
        try:
            self._update_from_dict()
            self.app.validate()
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration {self.config_file}: {e}") from e
        self._modules = None

    def _merge_env_vars(self) -> None:
        """Collect environment overrides. They are never written back to disk."""
        self._env_overrides = {}
        if "INSTALLER_LOG_DIR" in os.environ:
            self._env_overrides["log_dir"] = os.environ["INSTALLER_LOG_DIR"]
        if "INSTALLER_LOG_LEVEL" in os.environ:
            self._env_overrides["log_level"] = os.environ["INSTALLER_LOG_LEVEL"].upper()

    def _resolve(self, value: Any) -> Path:
        path = Path(str(value)).expanduser()
        if not path.is_absolute():
            path = self.config_file.parent / path
        return path

    def _update_from_dict(self) -> None:
        """Update app settings from loaded data."""
        data = {**self.data, **self._env_overrides}
        defaults = AppConfig()

        answer_file = data.get("answer_file")
        command = data.get("command", defaults.command)
        if isinstance(command, str):
            command = command.split()

        self.app = AppConfig(
            name=str(data.get("name") or self.config_file.stem),
            description=data.get("description") or "",
            answer_file=self._resolve(answer_file) if answer_file else None,
            log_dir=Path(data.get("log_dir", defaults.log_dir)),
            log_name=data.get("log_name", defaults.log_name),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
            verbose_log_level=str(data.get("verbose_log_level", defaults.verbose_log_level)).upper(),
            colors=bool(data.get("colors", defaults.colors)),
            dont_save_answers=bool(data.get("dont_save_answers", defaults.dont_save_answers)),
            check_dirs=[self._resolve(d) for d in data.get("check_dirs") or []],
            module_dirs=[self._resolve(d) for d in data.get("module_dirs") or []],
            hook_dirs=[self._resolve(d) for d in data.get("hook_dirs") or []],
            command=list(command),
            entry=data.get("entry", defaults.entry),
            custom=data.get("custom") or {},
        )

    @property
    def answer_file(self) -> Optional[Path]:
        return self.app.answer_file

    @property
    def log_file(self) -> Path:
        return self.app.log_dir / self.app.log_name

    @property
    def temp_config_file(self) -> Path:
        """Private temporary answer file, created on first access."""
        if self._temp_config_file is None:
            fd, name = tempfile.mkstemp(prefix="installer_answers_", suffix=".yaml")
            os.close(fd)
            self._temp_config_file = Path(name)
        return self._temp_config_file

    def _load_answers(self) -> Dict[str, Any]:
        if self.answer_file is None:
            raise NoAnswerFileError(f"No answer file declared in {self.config_file}")
        if not self.answer_file.exists():
            raise NoAnswerFileError(f"Answer file {self.answer_file} not found")

        try:
            with open(self.answer_file, 'rb') as f:
                answers = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse answer file {self.answer_file}: {e}") from e
        if not isinstance(answers, dict):
            raise ConfigurationError(f"Answer file must contain a mapping: {self.answer_file}")
        return answers

    def _build_module(self, name: str, answer: Any) -> Module:
        catalogue = self.data.get("modules") or {}
        definitions = (catalogue.get(name) or {}).get("params") or {}
        answered = answer if isinstance(answer, dict) else {}

        module = Module(name=name, enabled=answer is not False)
        for param_name, definition in definitions.items():
            if not isinstance(definition, dict):
                definition = {"default": definition}
            default = definition.get("default")
            is_answered = param_name in answered
            module.params.append(Parameter(
                module=name,
                name=str(param_name),
                default=default,
                value=copy.deepcopy(answered[param_name] if is_answered else default),
                doc=definition.get("doc"),
                type=definition.get("type", "any"),
                multivalued=bool(definition.get("multivalued", False)),
                answered=is_answered,
            ))

        # Answered parameters the catalogue does not document
        for param_name, value in answered.items():
            if param_name not in definitions:
                module.params.append(Parameter(
                    module=name,
                    name=str(param_name),
                    value=copy.deepcopy(value),
                    answered=True,
                ))
        return module

    @property
    def modules(self) -> List[Module]:
        if self._modules is None:
            self._modules = [
                self._build_module(str(name), answer)
                for name, answer in self._load_answers().items()
            ]
        return self._modules

    def module(self, name: str) -> Optional[Module]:
        for mod in self.modules:
            if mod.name == name:
                return mod
        return None

    def module_enabled(self, name: str) -> bool:
        mod = self.module(name)
        return bool(mod and mod.enabled)

    @property
    def params(self) -> List[Parameter]:
        return [param for mod in self.modules for param in mod.params]

    def param(self, module_name: str, name: str) -> Optional[Parameter]:
        mod = self.module(module_name)
        return mod.param(name) if mod else None

    def apply_module_toggles(self, toggles: Dict[str, bool]) -> None:
        """Enable or disable modules by name.

        Modules documented in the scenario catalogue but absent from the
        answer file are added.
        """
        catalogue = self.data.get("modules") or {}
        for name, enabled in toggles.items():
            mod = self.module(name)
            if mod is None:
                if name not in catalogue:
                    raise UnknownModuleError(f"Module {name} is not known to scenario {self.app.name}")
                mod = self._build_module(name, True)
                self.modules.append(mod)
            mod.enabled = bool(enabled)
            logger.debug(f"Module {name} {'enabled' if enabled else 'disabled'} from command line")

    def preset_defaults_from_other_config(self, other: Configuration) -> None:
        """Use values of ``other`` as defaults; explicit answers keep precedence."""
        for param in self.params:
            other_param = other.param(param.module, param.name)
            if other_param is None or other_param.value is None:
                continue
            param.default = copy.deepcopy(other_param.value)
            if not param.answered:
                param.value = copy.deepcopy(other_param.value)

    def migrate_configuration(self, other: Configuration, skip: Iterable[str] = ()) -> None:
        """Copy app settings from ``other`` into this scenario file and save it."""
        skip = set(skip)
        for key in MIGRATED_KEYS:
            if key in skip or key not in other.data:
                continue
            self.data[key] = copy.deepcopy(other.data[key])
        self.save_configuration()

    def save_configuration(self) -> None:
        """Write the scenario data back to its file."""
        with open(self.config_file, 'w') as f:
            yaml.safe_dump(self.data, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Configuration saved to {self.config_file}")

    def answers_data(self) -> Dict[str, Any]:
        return {mod.name: mod.params_hash() if mod.enabled else False for mod in self.modules}

    def store(self, data: Dict[str, Any], path: Optional[Path] = None) -> Path:
        """Write answers to ``path`` or to the scenario's answer file."""
        target = Path(path) if path else self.answer_file
        if target is None:
            raise NoAnswerFileError(f"No answer file declared in {self.config_file}")

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w') as f:
            f.write("# Answers for scenario %s, regenerated on every run\n" % self.app.name)
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        os.chmod(target, 0o600)
        logger.info(f"Answers stored in {target}")
        return target

    def validate(self) -> List[str]:
        """Validate parameter values of enabled modules."""
        errors = []
        for mod in self.modules:
            if not mod.enabled:
                continue
            for param in mod.params:
                message = param.validate()
                if message:
                    errors.append(message)
        return errors
