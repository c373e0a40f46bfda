import sys
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import msgspec
import pytest
from click.testing import CliRunner, Result
from loguru import logger

from pluginupdater.cli.main import cli, run_restart_command
from pluginupdater.utils.constants import CLEANUP_MARKER_NAME


@pytest.fixture(autouse=True)
def restore_loguru() -> Generator[None, None, None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


def invoke(data_dir: Path, *args: str) -> Result:
    return CliRunner().invoke(cli, ["--data-dir", str(data_dir), *args])


def test_update_with_nothing_enabled_writes_default_config(
    data_dir: Path, plugins_dir: Path
) -> None:
    result = invoke(data_dir, "update", "--plugins-dir", str(plugins_dir))

    assert result.exit_code == 0, result.output
    assert "No plugins are enabled" in result.output
    config = msgspec.json.decode((data_dir / "config.json").read_bytes())
    assert config["targets"]["geyser"] is False


def test_update_rejects_missing_plugins_dir(data_dir: Path, tmp_path: Path) -> None:
    result = invoke(data_dir, "update", "--plugins-dir", str(tmp_path / "missing"))

    assert result.exit_code == 1


def test_check_lists_disabled_projects(data_dir: Path, plugins_dir: Path) -> None:
    result = invoke(
        data_dir, "check", "--platform", "velocity", "--plugins-dir", str(plugins_dir)
    )

    assert result.exit_code == 0, result.output
    assert "geyser: disabled" in result.output
    assert "viaversion: disabled" in result.output


def test_packtest_fails_when_cleanup_disabled(
    data_dir: Path, plugins_dir: Path
) -> None:
    result = invoke(data_dir, "packtest", "--plugins-dir", str(plugins_dir))

    assert result.exit_code == 1
    assert "not scheduled" in result.output


def test_cleanup_without_marker(data_dir: Path, plugins_dir: Path) -> None:
    result = invoke(
        data_dir, "cleanup", "--platform", "paper", "--plugins-dir", str(plugins_dir)
    )

    assert result.exit_code == 0, result.output
    assert "No cleanup pending" in result.output


def test_cleanup_reports_consumed_marker_with_nothing_removed(
    data_dir: Path, plugins_dir: Path, geyser_extensions: Path
) -> None:
    folder = geyser_extensions / "GeyserModelEngineExtension"
    (folder / "input").mkdir(parents=True)
    (folder / CLEANUP_MARKER_NAME).touch()

    result = invoke(data_dir, "cleanup", "--plugins-dir", str(plugins_dir))

    assert result.exit_code == 0, result.output
    assert "removed 0 generated file(s)" in result.output
    assert "No cleanup pending" not in result.output
    assert not (folder / CLEANUP_MARKER_NAME).exists()


def test_invalid_config_is_reported(data_dir: Path, plugins_dir: Path) -> None:
    data_dir.mkdir()
    (data_dir / "config.json").write_text("{broken")

    result = invoke(data_dir, "check", "--plugins-dir", str(plugins_dir))

    assert result.exit_code == 1


def test_run_restart_command_splits_arguments() -> None:
    with patch("pluginupdater.cli.main.subprocess.run") as run_mock:
        run_mock.return_value = MagicMock(returncode=0)

        assert run_restart_command("systemctl restart 'mc server'") == 0

    run_mock.assert_called_once_with(["systemctl", "restart", "mc server"], check=False)


def test_run_restart_command_handles_missing_binary() -> None:
    with patch(
        "pluginupdater.cli.main.subprocess.run", side_effect=FileNotFoundError("nope")
    ):
        assert run_restart_command("restart") == -1
    assert run_restart_command("   ") == -1
