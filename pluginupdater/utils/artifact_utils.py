import os
from pathlib import Path
from urllib.parse import unquote, urlparse

from loguru import logger

from pluginupdater.models.project import ALL_PLATFORM_TOKENS, Platform, Project
from pluginupdater.utils.constants import (
    ARTIFACT_EXTENSION,
    DEFAULT_FILENAMES,
    EXTENSIONS_FOLDER_NAME,
)
from pluginupdater.utils.exception import LocalStateError, ParentNotInstalledError


def default_filename(project: Project, platform: Platform) -> str:
    """Installed filename used when the upstream does not provide one."""
    entry = DEFAULT_FILENAMES[project]
    if isinstance(entry, dict):
        return entry[platform]
    return entry


def filename_from_url(url: str) -> str:
    """
    Last path segment of a URL, percent-decoded.

    >>> filename_from_url("https://ci.example/job/A/artifact/build/libs/A%20B-1.0.jar")
    'A B-1.0.jar'
    """
    path = urlparse(url).path
    return unquote(path.rsplit("/", 1)[-1])


def is_update_available(installed: str, latest: str) -> bool:
    """
    Compare the installed and the latest artifact by filename.

    Upstreams embed the version in the filename, so any difference,
    ignoring case, counts as an update. No version ordering is attempted.
    """
    return installed.lower() != latest.lower()


def matches_project(project: Project, filename: str) -> bool:
    traits = project.traits
    name = filename.lower()
    if not name.endswith(ARTIFACT_EXTENSION):
        return False
    hint = traits.file_hint.lower()
    if traits.prefix_match:
        if not name.startswith(hint):
            return False
    elif hint not in name:
        return False
    return not any(fragment in name for fragment in traits.name_exclusions)


def find_project_artifacts(project: Project, directory: Path) -> list[Path]:
    """
    Every file in a directory that is recognized as an artifact of the project.

    :return: matching files sorted by name, empty if the directory is missing
    :raises LocalStateError: if the directory exists but cannot be listed
    """
    if not directory.is_dir():
        return []

    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        raise LocalStateError(f"Unable to list {directory}: {e}") from e

    return [
        directory / entry.name
        for entry in entries
        if entry.is_file() and matches_project(project, entry.name)
    ]


def find_existing_artifact(
    project: Project, directory: Path, platform: Platform | None = None
) -> Path | None:
    """
    Find the installed artifact of a project in a directory.

    When several files match, one naming the requested platform wins, then
    one naming any platform, then the first by name.

    :param project: project to look for
    :param directory: folder to scan (not recursive)
    :param platform: platform whose build is preferred
    :return: path of the installed artifact, or None
    :raises LocalStateError: if the directory exists but cannot be listed
    """
    candidates = [path.name for path in find_project_artifacts(project, directory)]
    if not candidates:
        return None
    if len(candidates) > 1:
        logger.debug(
            f"Multiple {project.api_name} candidates in {directory}: {candidates}"
        )

    preferred_tokens = [platform.tokens] if platform is not None else []
    preferred_tokens.append(ALL_PLATFORM_TOKENS)
    for tokens in preferred_tokens:
        for name in candidates:
            lowered = name.lower()
            if any(token in lowered for token in tokens):
                return directory / name
    return directory / candidates[0]


def find_extensions_folder(
    platform: Platform, install_dir: Path, create: bool = True
) -> Path:
    """
    Locate the Geyser extensions folder for a platform.

    :param platform: platform whose Geyser folder hosts the extensions
    :param install_dir: shared plugins directory
    :param create: create the extensions folder when Geyser is present
    :return: path of the extensions folder
    :raises ParentNotInstalledError: if the Geyser folder does not exist
    :raises LocalStateError: if the extensions folder cannot be created
    """
    geyser_folder = install_dir / platform.geyser_folder_name
    if not geyser_folder.is_dir():
        raise ParentNotInstalledError(
            "Geyser folder not found. Make sure Geyser is installed."
        )
    extensions = geyser_folder / EXTENSIONS_FOLDER_NAME
    if create and not extensions.is_dir():
        try:
            extensions.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalStateError(f"Unable to create {extensions}: {e}") from e
        logger.info(f"Created extensions folder: {extensions}")
    return extensions


def target_directory(project: Project, platform: Platform, install_dir: Path) -> Path:
    """Folder a project's artifact is installed into."""
    if project.traits.extension:
        return find_extensions_folder(platform, install_dir)
    return install_dir
