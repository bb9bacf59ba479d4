"""Unit tests for the exit handler."""

import pytest

from provision_installer.core.exit_handler import EXIT_CODES, ExitHandler
from provision_installer.errors import (
    InstallerExit,
    InvalidSystemError,
    ScenarioChangeBlockedError,
    UnknownModuleError,
    UnknownScenarioError,
    WizardCancelled,
)


@pytest.mark.unit
class TestExitHandler:
    """Test exit code translation and cleanup."""

    @pytest.mark.parametrize("code,expected", [
        ("success", 0),
        ("invalid_system", 20),
        ("invalid_values", 21),
        ("unknown_module", 26),
        ("scenario_error", 30),
        ("unknown_scenario", 31),
        (2, 2),
        (0, 0),
    ])
    def test_translate(self, code, expected):
        assert ExitHandler.translate_exit_code(code) == expected

    def test_unknown_symbol(self):
        with pytest.raises(ValueError):
            ExitHandler.translate_exit_code("exploded")

    def test_error_classes_have_known_codes(self):
        for error in (UnknownScenarioError, ScenarioChangeBlockedError, UnknownModuleError,
                      InvalidSystemError, WizardCancelled):
            assert error.exit_code in EXIT_CODES
        assert EXIT_CODES[WizardCancelled.exit_code] == 0

    def test_exit_runs_hook_and_cleanup(self, tmp_path):
        handler = ExitHandler()
        temp_file = tmp_path / "answers.yaml"
        temp_file.write_text("x: 1\n")
        temp_dir = tmp_path / "defaults"
        (temp_dir / "nested").mkdir(parents=True)
        handler.register_cleanup_path(temp_file)
        handler.register_cleanup_path(temp_dir)
        handler.register_cleanup_path(tmp_path / "never-created")
        calls = []

        with pytest.raises(InstallerExit) as exc_info:
            handler.exit("scenario_error", lambda: calls.append(temp_file.exists()))

        assert exc_info.value.code == 30
        assert handler.exit_code == 30
        assert calls == [True]
        assert not temp_file.exists()
        assert not temp_dir.exists()

    def test_register_is_idempotent(self, tmp_path):
        handler = ExitHandler()
        handler.register_cleanup_path(tmp_path / "a")
        handler.register_cleanup_path(str(tmp_path / "a"))
        assert handler.cleanup_paths == [tmp_path / "a"]
