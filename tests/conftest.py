from pathlib import Path

import pytest

from pluginupdater.models.project import Platform
from pluginupdater.models.settings import Config
from pluginupdater.utils.http_client import UpstreamClient
from tests.fakes import FakeSession


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession) -> UpstreamClient:
    return UpstreamClient(session=fake_session)


@pytest.fixture
def plugins_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "plugins"
    directory.mkdir()
    return directory


@pytest.fixture
def geyser_extensions(plugins_dir: Path) -> Path:
    """Geyser installed on Spigot with an extensions folder."""
    extensions = plugins_dir / Platform.SPIGOT.geyser_folder_name / "extensions"
    extensions.mkdir(parents=True)
    return extensions


@pytest.fixture
def config() -> Config:
    return Config()
