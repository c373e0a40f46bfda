"""
Typed views of the JSON documents returned by upstream sources.

Only the fields the resolvers read are declared; everything else is ignored
when decoding.
"""

import msgspec


class GitHubAsset(msgspec.Struct):
    name: str = ""
    browser_download_url: str = ""


class GitHubRelease(msgspec.Struct):
    tag_name: str = ""
    assets: list[GitHubAsset] = msgspec.field(default_factory=list)


class GitHubTag(msgspec.Struct):
    name: str


class JenkinsArtifact(msgspec.Struct, rename="camel"):
    file_name: str = ""
    relative_path: str = ""


class JenkinsBuild(msgspec.Struct):
    number: int | None = None
    artifacts: list[JenkinsArtifact] = msgspec.field(default_factory=list)


class LuckPermsDownloads(msgspec.Struct):
    downloads: dict[str, str]
