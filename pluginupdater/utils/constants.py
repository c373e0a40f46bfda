from pluginupdater.models.project import Platform, Project

APP_NAME = "PluginUpdater"
USER_AGENT = "PluginUpdater/1.0.0 (+https://github.com/pluginupdater/pluginupdater)"

# Network
API_TIMEOUT = 15  # seconds, metadata requests
DOWNLOAD_TIMEOUT = 60  # seconds, artifact downloads
DOWNLOAD_CHUNK_SIZE = 131072  # 128 KB
GITHUB_API_HOST = "api.github.com"

# Upstream sources
GEYSER_DOWNLOAD_BASE = "https://download.geysermc.org/v2/projects"
LUCKPERMS_METADATA_URL = "https://metadata.luckperms.net/data/downloads"

PACKETEVENTS_RELEASE_URL = (
    "https://api.github.com/repos/retrooper/packetevents/releases/latest"
)
PACKETEVENTS_JOB_URL = "https://ci.codemc.io/job/retrooper/job/packetevents"

PROTOCOLLIB_REPO_API = "https://api.github.com/repos/dmulloy2/ProtocolLib"
PROTOCOLLIB_RELEASE_URL = f"{PROTOCOLLIB_REPO_API}/releases/latest"
PROTOCOLLIB_DEV_RELEASE_URL = f"{PROTOCOLLIB_REPO_API}/releases/tags/dev-build"

VIAVERSION_JOB_URL = "https://ci.viaversion.com/job/ViaVersion"
VIABACKWARDS_JOB_URL = "https://ci.viaversion.com/job/ViaBackwards"
VIAREWIND_JOB_URL = "https://ci.viaversion.com/job/ViaRewind"
VIAREWIND_LEGACY_JOB_URL = "https://ci.viaversion.com/job/ViaRewind%20Legacy%20Support"
FAWE_JOB_URL = "https://ci.athion.net/job/FastAsyncWorldEdit"

PLACEHOLDERAPI_TAGS_URL = (
    "https://api.github.com/repos/PlaceholderAPI/PlaceholderAPI/tags"
)
PLACEHOLDERAPI_DOWNLOAD_TEMPLATE = "https://github.com/PlaceholderAPI/PlaceholderAPI/releases/download/{tag}/PlaceholderAPI-{tag}.jar"

ITEMNBTAPI_RELEASES_URL = "https://api.github.com/repos/tr7zw/Item-NBT-API/releases"

GEYSERUTILS_RELEASE_URL = (
    "https://api.github.com/repos/GeyserExtensionists/GeyserUtils/releases/latest"
)
GEYSERMODELENGINE_RELEASE_URL = "https://api.github.com/repos/xSquishyLiam/mc-GeyserModelEngine-plugin/releases/latest"

# Jenkins
JENKINS_LAST_BUILD = "lastSuccessfulBuild"
JENKINS_LIBS_PATH = "build/libs"

# Artifacts
ARTIFACT_EXTENSION = ".jar"
TEMP_DOWNLOAD_SUFFIX = ".part"
DEFAULT_EXCLUSIONS: tuple[str, ...] = ("-sources", "-javadoc")
PACKETEVENTS_EXCLUSIONS: tuple[str, ...] = ("-api-", *DEFAULT_EXCLUSIONS)

# Filesystem layout
EXTENSIONS_FOLDER_NAME = "extensions"
CLEANUP_MARKER_NAME = ".cleanup-pending"
CLEANUP_PRESERVED_NAMES = frozenset({"input", CLEANUP_MARKER_NAME})
MODEL_ENGINE_FOLDER_NAMES: tuple[str, ...] = (
    "GeyserModelEngineExtension",
    "geysermodelengineextension",
    "GeyserModelEnginePackGenerator",
    "geysermodelenginepackgenerator",
    "Geyser-ModelEnginePackGenerator",
)
MODEL_ENGINE_FALLBACK_TOKENS: tuple[str, ...] = ("modelengine", "pack")

# Files
CONFIG_FILE_NAME = "config.json"
HISTORY_FILE_NAME = "history.log"

# Installed filenames for sources that never expose a real one
# (and fallbacks when an upstream URL carries no usable filename)
DEFAULT_FILENAMES: dict[Project, dict[Platform, str] | str] = {
    Project.GEYSER: {
        Platform.SPIGOT: "Geyser-Spigot.jar",
        Platform.BUNGEECORD: "Geyser-BungeeCord.jar",
        Platform.VELOCITY: "Geyser-Velocity.jar",
    },
    Project.FLOODGATE: {
        Platform.SPIGOT: "floodgate-spigot.jar",
        Platform.BUNGEECORD: "floodgate-bungee.jar",
        Platform.VELOCITY: "floodgate-velocity.jar",
    },
    Project.LUCKPERMS: {
        Platform.SPIGOT: "LuckPerms-Bukkit.jar",
        Platform.BUNGEECORD: "LuckPerms-Bungee.jar",
        Platform.VELOCITY: "LuckPerms-Velocity.jar",
    },
    Project.PACKETEVENTS: {
        Platform.SPIGOT: "packetevents-spigot.jar",
        Platform.BUNGEECORD: "packetevents-bungeecord.jar",
        Platform.VELOCITY: "packetevents-velocity.jar",
    },
    Project.PROTOCOLLIB: "ProtocolLib.jar",
    Project.VIAVERSION: "ViaVersion.jar",
    Project.VIABACKWARDS: "ViaBackwards.jar",
    Project.VIAREWIND: "ViaRewind.jar",
    Project.VIAREWIND_LEGACY: "ViaRewind-Legacy-Support.jar",
    Project.FAWE: "FastAsyncWorldEdit.jar",
    Project.PLACEHOLDERAPI: "PlaceholderAPI.jar",
    Project.ITEMNBTAPI: "item-nbt-api-plugin.jar",
    Project.GEYSERUTILS_EXTENSION: "geyserutils-geyser.jar",
    Project.GEYSERUTILS_PLUGIN: {
        Platform.SPIGOT: "geyserutils-spigot.jar",
        Platform.BUNGEECORD: "geyserutils-bungee.jar",
        Platform.VELOCITY: "geyserutils-velocity.jar",
    },
    Project.GEYSERMODELENGINE_EXTENSION: "GeyserModelEngine-Extension.jar",
    Project.GEYSERMODELENGINE_PLUGIN: "GeyserModelEngine-Plugin.jar",
}
