from enum import Enum
from pathlib import Path
from typing import Callable

import msgspec
from loguru import logger

from pluginupdater.models.project import Platform, Project
from pluginupdater.utils.exception import ConfigError


class Channel(Enum):
    STABLE = "stable"
    DEV = "dev"


class ChannelTarget(msgspec.Struct, rename="camel"):
    enabled: bool = False
    use_dev_builds: bool = False

    @property
    def channel(self) -> Channel:
        return Channel.DEV if self.use_dev_builds else Channel.STABLE


class ViaPlugins(msgspec.Struct, rename="camel"):
    via_version: bool = False
    via_backwards: bool = False
    via_rewind: bool = False
    via_rewind_legacy: bool = False


class ModelEngineExtension(msgspec.Struct, rename="camel"):
    enabled: bool = False
    clean_on_update: bool = False


class GeyserExtensions(msgspec.Struct, rename="camel"):
    geyser_utils: bool = False
    geyser_model_engine_extension: ModelEngineExtension = msgspec.field(
        default_factory=ModelEngineExtension
    )
    geyser_model_engine_plugin: bool = False


class TargetsConfig(msgspec.Struct, rename="camel"):
    """Which projects are kept up to date. Everything is opt-in."""

    geyser: bool = False
    floodgate: bool = False
    luckperms: bool = False
    fawe: bool = False
    placeholderapi: bool = False
    itemnbtapi: bool = False
    packetevents: ChannelTarget = msgspec.field(default_factory=ChannelTarget)
    protocollib: ChannelTarget = msgspec.field(default_factory=ChannelTarget)
    via_plugins: ViaPlugins = msgspec.field(default_factory=ViaPlugins)
    geyser_extensions: GeyserExtensions = msgspec.field(
        default_factory=GeyserExtensions
    )

    def is_enabled(self, project: Project) -> bool:
        return _ENABLED_LOOKUP[project](self)

    def channel_for(self, project: Project) -> Channel:
        """Release channel for a project; only channel-switchable projects can be DEV."""
        target = _CHANNEL_TARGETS.get(project)
        return target(self).channel if target else Channel.STABLE


_ENABLED_LOOKUP: dict[Project, Callable[[TargetsConfig], bool]] = {
    Project.GEYSER: lambda t: t.geyser,
    Project.FLOODGATE: lambda t: t.floodgate,
    Project.LUCKPERMS: lambda t: t.luckperms,
    Project.PACKETEVENTS: lambda t: t.packetevents.enabled,
    Project.PROTOCOLLIB: lambda t: t.protocollib.enabled,
    Project.VIAVERSION: lambda t: t.via_plugins.via_version,
    Project.VIABACKWARDS: lambda t: t.via_plugins.via_backwards,
    Project.VIAREWIND: lambda t: t.via_plugins.via_rewind,
    Project.VIAREWIND_LEGACY: lambda t: t.via_plugins.via_rewind_legacy,
    Project.FAWE: lambda t: t.fawe,
    Project.PLACEHOLDERAPI: lambda t: t.placeholderapi,
    Project.ITEMNBTAPI: lambda t: t.itemnbtapi,
    # One switch covers both halves of GeyserUtils
    Project.GEYSERUTILS_EXTENSION: lambda t: t.geyser_extensions.geyser_utils,
    Project.GEYSERUTILS_PLUGIN: lambda t: t.geyser_extensions.geyser_utils,
    Project.GEYSERMODELENGINE_EXTENSION: lambda t: (
        t.geyser_extensions.geyser_model_engine_extension.enabled
    ),
    Project.GEYSERMODELENGINE_PLUGIN: lambda t: (
        t.geyser_extensions.geyser_model_engine_plugin
    ),
}

_CHANNEL_TARGETS: dict[Project, Callable[[TargetsConfig], ChannelTarget]] = {
    Project.PACKETEVENTS: lambda t: t.packetevents,
    Project.PROTOCOLLIB: lambda t: t.protocollib,
}


class PostUpdateConfig(msgspec.Struct, rename="camel"):
    notify_console: bool = True
    run_restart_command: bool = False
    restart_command: str = "restart"


class UpdateHistoryConfig(msgspec.Struct, rename="camel"):
    enabled: bool = True
    log_checks: bool = True
    log_updates: bool = True
    log_errors: bool = True
    max_file_size_mb: int = 10


class Config(msgspec.Struct, rename="camel"):
    """Root of config.json. The engine only reads it."""

    enabled: bool = True
    language: str = "en"
    check_on_startup: bool = True
    github_token: str = ""
    targets: TargetsConfig = msgspec.field(default_factory=TargetsConfig)
    post_update: PostUpdateConfig = msgspec.field(default_factory=PostUpdateConfig)
    update_history: UpdateHistoryConfig = msgspec.field(
        default_factory=UpdateHistoryConfig
    )

    @property
    def clean_model_engine_on_update(self) -> bool:
        extension = self.targets.geyser_extensions.geyser_model_engine_extension
        return extension.enabled and extension.clean_on_update


def collect_targets(config: Config, platform: Platform) -> list[Project]:
    """
    Enabled projects for an update run, in catalog order.

    Platform-gated projects are left out on platforms they do not support.
    Other unsupported combinations stay in so the run reports them.
    """
    targets: list[Project] = []
    for project in Project:
        if not config.targets.is_enabled(project):
            continue
        if project.traits.platform_gated and not project.supports(platform):
            continue
        targets.append(project)
    return targets


def load_config(path: Path) -> Config:
    """
    Load the configuration file, writing the defaults first if it does not exist.

    :param path: location of config.json
    :return: the decoded Config
    :raises ConfigError: if the file cannot be read or is not a valid configuration
    """
    if not path.exists():
        logger.info(f"No configuration found at {path}, writing defaults")
        config = Config()
        save_config(config, path)
        return config

    try:
        return msgspec.json.decode(path.read_bytes(), type=Config)
    except OSError as e:
        raise ConfigError(f"Unable to read configuration {path}: {e}") from e
    except msgspec.ValidationError as e:
        raise ConfigError(f"Invalid configuration {path}: {e}") from e
    except msgspec.DecodeError as e:
        raise ConfigError(f"Malformed configuration {path}: {e}") from e


def save_config(config: Config, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(msgspec.json.format(msgspec.json.encode(config), indent=2))
    except OSError as e:
        raise ConfigError(f"Unable to write configuration {path}: {e}") from e
