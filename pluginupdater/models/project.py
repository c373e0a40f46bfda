from enum import Enum

import msgspec


class Platform(Enum):
    """
    Server or proxy software that hosts the installed add-ons.

    The value is the platform name used by upstream download APIs.
    """

    SPIGOT = "spigot"
    BUNGEECORD = "bungee"
    VELOCITY = "velocity"

    @property
    def api_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _PLATFORM_DISPLAY_NAMES[self]

    @property
    def geyser_folder_name(self) -> str:
        """Name of the Geyser data folder inside the plugins directory."""
        return f"Geyser-{self.display_name}"

    @property
    def tokens(self) -> tuple[str, ...]:
        """Lowercase filename fragments that identify a build for this platform."""
        return _PLATFORM_TOKENS[self]

    @classmethod
    def from_name(cls, name: str) -> "Platform":
        """
        Look up a platform by its api name or display name, ignoring case.

        :param name: e.g. "spigot", "Velocity" or "bungeecord"
        :return: the matching Platform
        :raises ValueError: if no platform matches
        """
        lowered = name.strip().lower()
        for platform in cls:
            if lowered in (platform.api_name, platform.display_name.lower()):
                return platform
        raise ValueError(f"Unknown platform: {name}")


_PLATFORM_DISPLAY_NAMES = {
    Platform.SPIGOT: "Spigot",
    Platform.BUNGEECORD: "BungeeCord",
    Platform.VELOCITY: "Velocity",
}

_PLATFORM_TOKENS = {
    Platform.SPIGOT: ("spigot", "paper", "bukkit"),
    Platform.BUNGEECORD: ("bungee",),
    Platform.VELOCITY: ("velocity",),
}

ALL_PLATFORM_TOKENS: tuple[str, ...] = tuple(
    token for tokens in _PLATFORM_TOKENS.values() for token in tokens
)


class Project(Enum):
    """Closed catalog of add-ons this tool knows how to update."""

    GEYSER = "geyser"
    FLOODGATE = "floodgate"
    LUCKPERMS = "luckperms"
    PACKETEVENTS = "packetevents"
    PROTOCOLLIB = "protocollib"
    VIAVERSION = "viaversion"
    VIABACKWARDS = "viabackwards"
    VIAREWIND = "viarewind"
    VIAREWIND_LEGACY = "viarewind-legacy"
    FAWE = "fawe"
    PLACEHOLDERAPI = "placeholderapi"
    ITEMNBTAPI = "itemnbtapi"
    GEYSERUTILS_EXTENSION = "geyserutils-extension"
    GEYSERMODELENGINE_EXTENSION = "geysermodelengine-extension"
    GEYSERUTILS_PLUGIN = "geyserutils-plugin"
    GEYSERMODELENGINE_PLUGIN = "geysermodelengine-plugin"

    @property
    def api_name(self) -> str:
        return self.value

    @property
    def traits(self) -> "ProjectTraits":
        return PROJECT_TRAITS[self]

    @property
    def file_hint(self) -> str:
        return self.traits.file_hint

    def supports(self, platform: Platform) -> bool:
        return platform in self.traits.platforms


ALL_PLATFORMS = frozenset(Platform)
SPIGOT_ONLY = frozenset({Platform.SPIGOT})


class ProjectTraits(msgspec.Struct, frozen=True):
    """
    Static capabilities of a project.

    file_hint: case-insensitive fragment identifying the project's installed jar
    prefix_match: the hint must start the filename instead of merely appearing in it
    name_exclusions: lowercase fragments that disqualify an otherwise matching file
    platforms: platforms the upstream publishes builds for
    platform_gated: left out of update runs on unsupported platforms instead of
        reporting an error
    extension: installed into the Geyser extensions folder
    ci_built: resolved from a Jenkins "last successful build"
    tag_released: resolved from GitHub tags or releases
    static_filename: upstream URL carries no filename, so the installed name is fixed
    cleanup_on_update: owns a folder that is swept by the deferred cleanup
    """

    file_hint: str
    prefix_match: bool = False
    name_exclusions: tuple[str, ...] = ()
    platforms: frozenset[Platform] = ALL_PLATFORMS
    platform_gated: bool = False
    extension: bool = False
    ci_built: bool = False
    tag_released: bool = False
    static_filename: bool = False
    cleanup_on_update: bool = False


PROJECT_TRAITS: dict[Project, ProjectTraits] = {
    Project.GEYSER: ProjectTraits(
        file_hint="geyser-", prefix_match=True, static_filename=True
    ),
    Project.FLOODGATE: ProjectTraits(file_hint="floodgate", static_filename=True),
    Project.LUCKPERMS: ProjectTraits(file_hint="luckperms"),
    Project.PACKETEVENTS: ProjectTraits(file_hint="packetevents", tag_released=True),
    Project.PROTOCOLLIB: ProjectTraits(
        file_hint="ProtocolLib", platforms=SPIGOT_ONLY, tag_released=True
    ),
    Project.VIAVERSION: ProjectTraits(
        file_hint="ViaVersion", platforms=SPIGOT_ONLY, ci_built=True
    ),
    Project.VIABACKWARDS: ProjectTraits(
        file_hint="ViaBackwards", platforms=SPIGOT_ONLY, ci_built=True
    ),
    Project.VIAREWIND: ProjectTraits(
        file_hint="ViaRewind",
        name_exclusions=("legacy",),
        platforms=SPIGOT_ONLY,
        ci_built=True,
    ),
    Project.VIAREWIND_LEGACY: ProjectTraits(
        file_hint="ViaRewind-Legacy-Support", platforms=SPIGOT_ONLY, ci_built=True
    ),
    Project.FAWE: ProjectTraits(
        file_hint="FastAsyncWorldEdit",
        platforms=SPIGOT_ONLY,
        platform_gated=True,
        ci_built=True,
    ),
    Project.PLACEHOLDERAPI: ProjectTraits(
        file_hint="PlaceholderAPI",
        platforms=SPIGOT_ONLY,
        platform_gated=True,
        tag_released=True,
    ),
    Project.ITEMNBTAPI: ProjectTraits(
        file_hint="item-nbt-api",
        platforms=SPIGOT_ONLY,
        platform_gated=True,
        tag_released=True,
    ),
    Project.GEYSERUTILS_EXTENSION: ProjectTraits(
        file_hint="geyserutils-geyser", extension=True, tag_released=True
    ),
    Project.GEYSERMODELENGINE_EXTENSION: ProjectTraits(
        file_hint="GeyserModelEngineExtension",
        extension=True,
        tag_released=True,
        cleanup_on_update=True,
    ),
    Project.GEYSERUTILS_PLUGIN: ProjectTraits(
        file_hint="geyserutils", tag_released=True
    ),
    Project.GEYSERMODELENGINE_PLUGIN: ProjectTraits(
        file_hint="GeyserModelEngine",
        name_exclusions=("extension",),
        platforms=SPIGOT_ONLY,
        platform_gated=True,
        tag_released=True,
    ),
}
