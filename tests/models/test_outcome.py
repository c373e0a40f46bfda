import pytest

from pluginupdater.models.outcome import UpdateOutcome, VersionInfo
from pluginupdater.models.project import Project


@pytest.mark.parametrize(
    "outcome",
    [
        UpdateOutcome.updated_to(Project.VIAVERSION, "ViaVersion-5.0.jar", "ViaVersion-5.1.jar"),
        UpdateOutcome.updated_to(Project.VIAVERSION, None, "ViaVersion-5.1.jar"),
        UpdateOutcome.unchanged(Project.VIAVERSION, "ViaVersion-5.1.jar"),
        UpdateOutcome.failed(Project.VIAVERSION, "boom"),
    ],
)
def test_exactly_one_branch_holds(outcome: UpdateOutcome) -> None:
    branches = [outcome.updated, outcome.skipped_no_change, outcome.error is not None]
    assert branches.count(True) == 1


def test_failed_outcome_always_has_message() -> None:
    outcome = UpdateOutcome.failed(Project.GEYSER, "")
    assert outcome.error
    assert not outcome.updated


def test_describe() -> None:
    assert (
        UpdateOutcome.updated_to(Project.LUCKPERMS, "a.jar", "b.jar").describe()
        == "luckperms: updated a.jar -> b.jar"
    )
    assert (
        UpdateOutcome.updated_to(Project.LUCKPERMS, None, "b.jar").describe()
        == "luckperms: installed b.jar"
    )
    assert "already up to date" in UpdateOutcome.unchanged(
        Project.LUCKPERMS, "b.jar"
    ).describe()
    assert UpdateOutcome.failed(Project.LUCKPERMS, "offline").describe() == (
        "luckperms: failed - offline"
    )


def test_version_info_factories() -> None:
    disabled = VersionInfo.disabled(Project.FAWE)
    assert not disabled.enabled
    assert not disabled.update_available

    missing = VersionInfo.not_installed(Project.FAWE, "FastAsyncWorldEdit-Paper-2.9.jar")
    assert missing.installed is None
    assert missing.update_available

    current = VersionInfo.up_to_date(Project.FAWE, "a.jar", build_number=12)
    assert current.installed == current.latest == "a.jar"
    assert not current.update_available
    assert current.build_number == 12

    outdated = VersionInfo.outdated(Project.FAWE, "a.jar", "b.jar")
    assert outdated.update_available

    failed = VersionInfo.failed(Project.FAWE, "offline", installed="a.jar")
    assert failed.error == "offline"
    assert failed.installed == "a.jar"
    assert not failed.update_available
