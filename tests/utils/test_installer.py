import os
from pathlib import Path

import pytest

from pluginupdater.models.project import Project
from pluginupdater.utils.exception import DownloadError, LocalStateError
from pluginupdater.utils.http_client import UpstreamClient
from pluginupdater.utils.installer import (
    download_to_temp,
    install_artifact,
    same_content_size,
)
from tests.fakes import FakeSession

URL = "https://ci.example/ViaVersion-5.1.jar"


def test_download_to_temp_writes_body(
    client: UpstreamClient, fake_session: FakeSession, tmp_path: Path
) -> None:
    fake_session.add_bytes(URL, b"x" * 300_000)

    temp_path = download_to_temp(client, URL, tmp_path, Project.VIAVERSION)

    assert temp_path.parent == tmp_path
    assert temp_path.name.startswith(".viaversion-")
    assert temp_path.read_bytes() == b"x" * 300_000


@pytest.mark.parametrize("status", [404, 503])
def test_download_failure_removes_temp_file(
    client: UpstreamClient, fake_session: FakeSession, tmp_path: Path, status: int
) -> None:
    fake_session.add_bytes(URL, b"error page", status=status)

    with pytest.raises(DownloadError, match="Download failed"):
        download_to_temp(client, URL, tmp_path, Project.VIAVERSION)

    assert list(tmp_path.iterdir()) == []


def test_install_artifact_replaces_stale_file(tmp_path: Path) -> None:
    old = tmp_path / "ViaVersion-5.0.jar"
    old.write_bytes(b"old")
    temp = tmp_path / ".viaversion-abc.part"
    temp.write_bytes(b"new")

    installed = install_artifact(temp, [old], tmp_path, "ViaVersion-5.1.jar")

    assert installed == tmp_path / "ViaVersion-5.1.jar"
    assert installed.read_bytes() == b"new"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["ViaVersion-5.1.jar"]


def test_install_artifact_removes_every_stale_file(tmp_path: Path) -> None:
    stale = [tmp_path / "ViaVersion-5.0.0.jar", tmp_path / "ViaVersion-5.0.1.jar"]
    for path in stale:
        path.write_bytes(b"old")
    temp = tmp_path / ".viaversion-abc.part"
    temp.write_bytes(b"new")

    install_artifact(temp, stale, tmp_path, "ViaVersion-5.1.0.jar")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["ViaVersion-5.1.0.jar"]


def test_failed_rename_keeps_previous_artifact(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    old = tmp_path / "ViaVersion-5.0.jar"
    old.write_bytes(b"old")
    temp = tmp_path / ".viaversion-abc.part"
    temp.write_bytes(b"new")

    def failing_replace(src: object, dst: object) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(LocalStateError, match="Unable to install ViaVersion-5.1.jar"):
        install_artifact(temp, [old], tmp_path, "ViaVersion-5.1.jar")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["ViaVersion-5.0.jar"]
    assert old.read_bytes() == b"old"


def test_install_artifact_overwrites_same_name(tmp_path: Path) -> None:
    old = tmp_path / "Geyser-Spigot.jar"
    old.write_bytes(b"old build")
    temp = tmp_path / ".geyser-abc.part"
    temp.write_bytes(b"newer build")

    install_artifact(temp, [old], tmp_path, "Geyser-Spigot.jar")

    assert old.read_bytes() == b"newer build"
    assert not temp.exists()


def test_same_content_size(tmp_path: Path) -> None:
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.write_bytes(b"123")
    second.write_bytes(b"456")

    assert same_content_size(first, second)
    second.write_bytes(b"4567")
    assert not same_content_size(first, second)
    assert not same_content_size(first, tmp_path / "missing")
