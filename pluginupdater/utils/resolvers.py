"""
Strategies that find the latest downloadable artifact of a project.

Each upstream publishes builds differently (fixed download endpoints, a JSON
feed, GitHub releases or tags, Jenkins "last successful build"). A resolver
hides one such shape behind resolve(), and RESOLVERS maps every project to
the resolver configured for it.

Resolvers only read upstream metadata. They never touch the filesystem and
never retry.
"""

from typing import Iterable, Mapping

import msgspec
from loguru import logger

from pluginupdater.models.project import Platform, Project
from pluginupdater.models.settings import Channel
from pluginupdater.models.upstream import (
    GitHubRelease,
    GitHubTag,
    JenkinsBuild,
    LuckPermsDownloads,
)
from pluginupdater.utils.artifact_utils import default_filename, filename_from_url
from pluginupdater.utils.constants import (
    ARTIFACT_EXTENSION,
    DEFAULT_EXCLUSIONS,
    FAWE_JOB_URL,
    GEYSER_DOWNLOAD_BASE,
    GEYSERMODELENGINE_RELEASE_URL,
    GEYSERUTILS_RELEASE_URL,
    ITEMNBTAPI_RELEASES_URL,
    JENKINS_LAST_BUILD,
    JENKINS_LIBS_PATH,
    LUCKPERMS_METADATA_URL,
    PACKETEVENTS_EXCLUSIONS,
    PACKETEVENTS_JOB_URL,
    PACKETEVENTS_RELEASE_URL,
    PLACEHOLDERAPI_DOWNLOAD_TEMPLATE,
    PLACEHOLDERAPI_TAGS_URL,
    PROTOCOLLIB_DEV_RELEASE_URL,
    PROTOCOLLIB_RELEASE_URL,
    VIABACKWARDS_JOB_URL,
    VIAREWIND_JOB_URL,
    VIAREWIND_LEGACY_JOB_URL,
    VIAVERSION_JOB_URL,
)
from pluginupdater.utils.exception import ResolutionError, UnsupportedPlatformError
from pluginupdater.utils.http_client import UpstreamClient

# A hint is either shared by all platforms or looked up per platform
Hint = str | Mapping[Platform, str] | None


class ResolvedArtifact(msgspec.Struct, frozen=True):
    url: str
    filename: str
    build_number: int | None = None


def _hint_for(hint: Hint, platform: Platform) -> str | None:
    if hint is None or isinstance(hint, str):
        return hint
    try:
        return hint[platform]
    except KeyError:
        raise UnsupportedPlatformError(
            f"No build published for {platform.display_name}"
        ) from None


def first_matching(
    candidates: Iterable[str],
    contains: str | None = None,
    prefix: str | None = None,
    exclusions: Iterable[str] = DEFAULT_EXCLUSIONS,
    extension: str = ARTIFACT_EXTENSION,
) -> str | None:
    """
    Return the first candidate, in the given order, that qualifies as an artifact.

    Comparisons ignore case. A candidate qualifies when it ends with the
    extension, contains every given fragment, starts with the prefix and
    contains none of the exclusions.

    Args:
        candidates: URLs, filenames or artifact paths in document order
        contains: Fragment that must appear in the candidate
        prefix: Fragment the candidate must start with
        exclusions: Fragments that disqualify a candidate (companion jars)
        extension: Required suffix

    Returns:
        The first qualifying candidate, or None
    """
    excluded = [fragment.lower() for fragment in exclusions]
    for candidate in candidates:
        lowered = candidate.lower()
        if not lowered.endswith(extension.lower()):
            continue
        if contains is not None and contains.lower() not in lowered:
            continue
        if prefix is not None and not lowered.startswith(prefix.lower()):
            continue
        if any(fragment in lowered for fragment in excluded):
            continue
        return candidate
    return None


class Resolver:
    """Base class of all source resolvers."""

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        raise NotImplementedError


class DirectPathResolver(Resolver):
    """
    GeyserMC download API. The "latest" URL is stable and always points at
    the newest build, so no metadata is fetched.
    """

    def __init__(self, base_url: str = GEYSER_DOWNLOAD_BASE) -> None:
        self.base_url = base_url

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        url = (
            f"{self.base_url}/{project.api_name}/versions/latest/builds/latest"
            f"/downloads/{platform.api_name}"
        )
        return ResolvedArtifact(url, default_filename(project, platform))


class MetadataFeedResolver(Resolver):
    """JSON feed mapping a per-platform key to a download URL (LuckPerms)."""

    def __init__(
        self,
        url: str,
        platform_keys: Mapping[Platform, str],
        source_name: str,
    ) -> None:
        self.url = url
        self.platform_keys = platform_keys
        self.source_name = source_name

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        key = self.platform_keys.get(platform, platform.api_name)
        feed = client.fetch_json(self.url, LuckPermsDownloads)
        url = feed.downloads.get(key)
        if not url:
            raise ResolutionError(
                f"Platform {key} not found in {self.source_name} downloads"
            )
        filename = filename_from_url(url) or default_filename(project, platform)
        return ResolvedArtifact(url, filename)


class ReleaseAssetResolver(Resolver):
    """
    GitHub release assets.

    Reads either a single release document or, with many=True, a list of
    releases scanned newest first. The first asset whose download URL
    matches the hint wins.
    """

    def __init__(
        self,
        url: str,
        contains: Hint = None,
        exclusions: tuple[str, ...] = DEFAULT_EXCLUSIONS,
        many: bool = False,
    ) -> None:
        self.url = url
        self.contains = contains
        self.exclusions = exclusions
        self.many = many

    def _releases(self, client: UpstreamClient) -> list[GitHubRelease]:
        if self.many:
            return client.fetch_json(self.url, list[GitHubRelease])
        return [client.fetch_json(self.url, GitHubRelease)]

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        contains = _hint_for(self.contains, platform)
        releases = self._releases(client)
        for release in releases:
            assets = {
                asset.browser_download_url: asset
                for asset in release.assets
                if asset.browser_download_url
            }
            match = first_matching(
                assets, contains=contains, exclusions=self.exclusions
            )
            if match is not None:
                logger.debug(f"{project.api_name}: {release.tag_name} -> {match}")
                filename = assets[match].name or filename_from_url(match)
                return ResolvedArtifact(match, filename)

        if not releases:
            raise ResolutionError(f"No releases found at {self.url}")
        raise ResolutionError(
            f"No matching {contains or ARTIFACT_EXTENSION} asset found in {self.url}"
        )


class LatestTagResolver(Resolver):
    """Newest GitHub tag, with the download URL built from a template."""

    def __init__(self, url: str, download_template: str) -> None:
        self.url = url
        self.download_template = download_template

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        tags = client.fetch_json(self.url, list[GitHubTag])
        if not tags or not tags[0].name:
            raise ResolutionError(f"No tags found at {self.url}")
        tag = tags[0].name
        url = self.download_template.format(tag=tag)
        return ResolvedArtifact(url, filename_from_url(url))


class CIBuildResolver(Resolver):
    """
    Jenkins "last successful build".

    Artifacts are matched either by fileName, in which case the download
    lives under build/libs, or by their full relativePath.
    """

    def __init__(
        self,
        job_url: str,
        contains: Hint = None,
        prefix: Hint = None,
        exclusions: tuple[str, ...] = DEFAULT_EXCLUSIONS,
        match_relative_path: bool = False,
    ) -> None:
        self.job_url = job_url.rstrip("/")
        self.contains = contains
        self.prefix = prefix
        self.exclusions = exclusions
        self.match_relative_path = match_relative_path

    @property
    def build_url(self) -> str:
        return f"{self.job_url}/{JENKINS_LAST_BUILD}"

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        build = client.fetch_json(f"{self.build_url}/api/json", JenkinsBuild)
        if self.match_relative_path:
            paths = [a.relative_path for a in build.artifacts if a.relative_path]
        else:
            paths = [a.file_name for a in build.artifacts if a.file_name]

        match = first_matching(
            paths,
            contains=_hint_for(self.contains, platform),
            prefix=_hint_for(self.prefix, platform),
            exclusions=self.exclusions,
        )
        if match is None:
            raise ResolutionError(
                f"No matching artifact in build #{build.number} of {self.job_url}"
            )

        if self.match_relative_path:
            url = f"{self.build_url}/artifact/{match}"
        else:
            url = f"{self.build_url}/artifact/{JENKINS_LIBS_PATH}/{match}"
        return ResolvedArtifact(url, match.rsplit("/", 1)[-1], build.number)


class ChannelResolver(Resolver):
    """Picks the stable or development source by the requested channel."""

    def __init__(self, stable: Resolver, dev: Resolver) -> None:
        self.stable = stable
        self.dev = dev

    def resolve(
        self,
        project: Project,
        platform: Platform,
        channel: Channel,
        client: UpstreamClient,
    ) -> ResolvedArtifact:
        resolver = self.dev if channel is Channel.DEV else self.stable
        return resolver.resolve(project, platform, channel, client)


_PACKETEVENTS_TOKENS = {
    Platform.SPIGOT: "spigot",
    Platform.BUNGEECORD: "bungeecord",
    Platform.VELOCITY: "velocity",
}

_GEYSER_DOWNLOADS = DirectPathResolver()

RESOLVERS: dict[Project, Resolver] = {
    Project.GEYSER: _GEYSER_DOWNLOADS,
    Project.FLOODGATE: _GEYSER_DOWNLOADS,
    Project.LUCKPERMS: MetadataFeedResolver(
        LUCKPERMS_METADATA_URL,
        platform_keys={
            Platform.SPIGOT: "bukkit",
            Platform.BUNGEECORD: "bungee",
            Platform.VELOCITY: "velocity",
        },
        source_name="LuckPerms",
    ),
    Project.PACKETEVENTS: ChannelResolver(
        stable=ReleaseAssetResolver(
            PACKETEVENTS_RELEASE_URL,
            contains={
                p: f"/packetevents-{t}-" for p, t in _PACKETEVENTS_TOKENS.items()
            },
            exclusions=PACKETEVENTS_EXCLUSIONS,
        ),
        dev=CIBuildResolver(
            PACKETEVENTS_JOB_URL,
            prefix={
                p: f"packetevents-{t}-" for p, t in _PACKETEVENTS_TOKENS.items()
            },
            exclusions=PACKETEVENTS_EXCLUSIONS,
        ),
    ),
    Project.PROTOCOLLIB: ChannelResolver(
        stable=ReleaseAssetResolver(PROTOCOLLIB_RELEASE_URL, contains="ProtocolLib"),
        dev=ReleaseAssetResolver(PROTOCOLLIB_DEV_RELEASE_URL, contains="ProtocolLib"),
    ),
    Project.VIAVERSION: CIBuildResolver(VIAVERSION_JOB_URL),
    Project.VIABACKWARDS: CIBuildResolver(VIABACKWARDS_JOB_URL),
    Project.VIAREWIND: CIBuildResolver(VIAREWIND_JOB_URL),
    Project.VIAREWIND_LEGACY: CIBuildResolver(VIAREWIND_LEGACY_JOB_URL),
    Project.FAWE: CIBuildResolver(
        FAWE_JOB_URL,
        contains="FastAsyncWorldEdit-Paper-",
        match_relative_path=True,
    ),
    Project.PLACEHOLDERAPI: LatestTagResolver(
        PLACEHOLDERAPI_TAGS_URL, PLACEHOLDERAPI_DOWNLOAD_TEMPLATE
    ),
    Project.ITEMNBTAPI: ReleaseAssetResolver(
        ITEMNBTAPI_RELEASES_URL, contains="item-nbt-api-plugin-", many=True
    ),
    Project.GEYSERUTILS_EXTENSION: ReleaseAssetResolver(
        GEYSERUTILS_RELEASE_URL, contains="geyserutils-geyser"
    ),
    Project.GEYSERUTILS_PLUGIN: ReleaseAssetResolver(
        GEYSERUTILS_RELEASE_URL,
        contains={
            Platform.SPIGOT: "geyserutils-spigot",
            Platform.BUNGEECORD: "geyserutils-bungee",
            Platform.VELOCITY: "geyserutils-velocity",
        },
    ),
    Project.GEYSERMODELENGINE_EXTENSION: ReleaseAssetResolver(
        GEYSERMODELENGINE_RELEASE_URL, contains="GeyserModelEngineExtension"
    ),
    Project.GEYSERMODELENGINE_PLUGIN: ReleaseAssetResolver(
        GEYSERMODELENGINE_RELEASE_URL,
        contains="GeyserModelEngine",
        exclusions=(*DEFAULT_EXCLUSIONS, "extension"),
    ),
}


def resolve_latest(
    project: Project,
    platform: Platform,
    channel: Channel,
    client: UpstreamClient,
) -> ResolvedArtifact:
    """
    Find the latest artifact of a project for a platform.

    :raises UnsupportedPlatformError: if the project publishes no build for the platform
    :raises ResolutionError: if the upstream cannot be read or has no matching artifact
    """
    if not project.supports(platform):
        supported = ", ".join(
            p.display_name for p in Platform if p in project.traits.platforms
        )
        raise UnsupportedPlatformError(
            f"{project.api_name} is only available for {supported}"
        )
    return RESOLVERS[project].resolve(project, platform, channel, client)
