from pathlib import Path

from pluginupdater.models.outcome import UpdateOutcome, VersionInfo
from pluginupdater.models.project import Project
from pluginupdater.models.settings import UpdateHistoryConfig
from pluginupdater.utils.update_history import UpdateHistory


def read_history(history: UpdateHistory) -> list[str]:
    history.close()
    return history.log_file.read_text(encoding="utf-8").splitlines()


def test_history_records_updates_and_errors(tmp_path: Path) -> None:
    history = UpdateHistory(UpdateHistoryConfig(), tmp_path / "history.log")

    history.log_update(UpdateOutcome.updated_to(Project.VIAVERSION, "a.jar", "b.jar"))
    history.log_update(UpdateOutcome.unchanged(Project.GEYSER, "Geyser-Spigot.jar"))
    history.log_update(UpdateOutcome.failed(Project.FAWE, "offline"))

    lines = read_history(history)
    assert len(lines) == 2
    assert lines[0].endswith("[UPDATE] viaversion: updated a.jar -> b.jar")
    assert lines[1].endswith("[ERROR] fawe: offline")


def test_history_records_checks(tmp_path: Path) -> None:
    history = UpdateHistory(UpdateHistoryConfig(), tmp_path / "history.log")

    history.log_check(VersionInfo.disabled(Project.FAWE))
    history.log_check(VersionInfo.not_installed(Project.LUCKPERMS, "LuckPerms.jar"))
    history.log_check(VersionInfo.up_to_date(Project.GEYSER, "Geyser-Spigot.jar"))

    lines = read_history(history)
    assert len(lines) == 2
    assert "[CHECK] luckperms: update available not installed -> LuckPerms.jar" in lines[0]
    assert "[CHECK] geyser: up to date (Geyser-Spigot.jar)" in lines[1]


def test_history_respects_switches(tmp_path: Path) -> None:
    config = UpdateHistoryConfig(log_updates=False, log_checks=False)
    history = UpdateHistory(config, tmp_path / "history.log")

    history.log_update(UpdateOutcome.updated_to(Project.VIAVERSION, None, "b.jar"))
    history.log_check(VersionInfo.outdated(Project.VIAVERSION, "a.jar", "b.jar"))
    history.log_error(Project.VIAVERSION, "boom")

    lines = read_history(history)
    assert len(lines) == 1
    assert lines[0].endswith("[ERROR] viaversion: boom")


def test_disabled_history_writes_nothing(tmp_path: Path) -> None:
    history = UpdateHistory(UpdateHistoryConfig(enabled=False), tmp_path / "history.log")

    history.log_error(Project.VIAVERSION, "boom")
    history.close()

    assert not history.enabled
    assert not (tmp_path / "history.log").exists()


def test_two_histories_do_not_share_entries(tmp_path: Path) -> None:
    first = UpdateHistory(UpdateHistoryConfig(), tmp_path / "first.log")
    second = UpdateHistory(UpdateHistoryConfig(), tmp_path / "second.log")

    first.log_error(Project.GEYSER, "first")
    second.log_error(Project.GEYSER, "second")

    assert read_history(first)[0].endswith("first")
    assert read_history(second)[0].endswith("second")
