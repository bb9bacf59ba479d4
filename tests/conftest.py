# tests/conftest.py
"""Pytest configuration and shared fixtures."""

import logging
import tempfile
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from provision_installer.core.context import RunContext, RunOptions
from tests.mocks import FakeWizard


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external processes")
    config.addinivalue_line("markers", "integration: tests spawning real child processes")


def write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path


@pytest.fixture
def config_dir(tmp_path):
    """Scenario directory with the 'foreman' and 'katello' scenarios."""
    scenarios = tmp_path / "scenarios.d"

    write_yaml(scenarios / "foreman.yaml", {
        "name": "Foreman",
        "description": "Foreman with a smart proxy",
        "answer_file": "foreman-answers.yaml",
        "log_dir": str(tmp_path / "log" / "foreman"),
        "log_name": "foreman.log",
        "log_level": "DEBUG",
        "colors": False,
        "modules": {
            "foreman": {"params": {
                "admin_password": {"default": "changeme", "type": "string", "doc": "Admin password"},
                "servers": {"default": ["a.example.com"], "type": "string", "multivalued": True},
            }},
            "puppet": {"params": {
                "server": {"default": True, "type": "boolean"},
            }},
            "proxy": {"params": {
                "port": {"default": 8443, "type": "integer"},
            }},
            "tftp": {"params": {
                "root": {"default": "/srv/tftp", "type": "string"},
            }},
        },
    })
    write_yaml(scenarios / "foreman-answers.yaml", {
        "foreman": {"admin_password": "secret"},
        "puppet": True,
        "proxy": True,
    })

    write_yaml(scenarios / "katello.yaml", {
        "name": "Katello",
        "description": "Foreman with content management",
        "answer_file": "katello-answers.yaml",
        "log_dir": str(tmp_path / "log" / "katello"),
        "log_name": "katello.log",
        "modules": {
            "foreman": {"params": {
                "admin_password": {"default": "changeme", "type": "string"},
            }},
            "katello": {"params": {
                "cdn": {"default": "https://cdn.example.com", "type": "string"},
            }},
            "proxy": {"params": {
                "port": {"default": 8443, "type": "integer"},
            }},
        },
    })
    write_yaml(scenarios / "katello-answers.yaml", {
        "foreman": True,
        "katello": True,
        "proxy": False,
    })

    return scenarios


@pytest.fixture
def single_scenario_dir(tmp_path):
    """Scenario directory holding one legacy scenario without a name."""
    scenarios = tmp_path / "single.d"
    write_yaml(scenarios / "legacy.yaml", {
        "answer_file": "legacy-answers.yaml",
        "log_dir": str(tmp_path / "log" / "legacy"),
    })
    write_yaml(scenarios / "legacy-answers.yaml", {"base": True})
    return scenarios


@pytest.fixture
def link_previous(config_dir):
    """Point the last scenario link at a scenario of ``config_dir``."""
    def link(name: str) -> Path:
        link_path = config_dir / "last_scenario.yaml"
        link_path.symlink_to(config_dir / f"{name}.yaml")
        return link_path
    return link


@pytest.fixture
def make_context():
    """Build a run context with a recording console."""
    def make(**options) -> RunContext:
        return RunContext(
            options=RunOptions(**options),
            console=Console(record=True, width=200, color_system=None),
            error_console=Console(record=True, width=200, color_system=None),
        )
    return make


@pytest.fixture
def wizard():
    return FakeWizard()


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Redirect temporary answer files into a directory the test can inspect."""
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Drop file handlers a test attached to the root logger."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
