import os
import tempfile
from pathlib import Path
from typing import Iterable

from loguru import logger

from pluginupdater.models.project import Project
from pluginupdater.utils.constants import TEMP_DOWNLOAD_SUFFIX
from pluginupdater.utils.exception import LocalStateError
from pluginupdater.utils.http_client import UpstreamClient


def download_to_temp(
    client: UpstreamClient, url: str, target_dir: Path, project: Project
) -> Path:
    """
    Download an artifact into a temporary file inside the target directory.

    The temporary file lives next to its final location so the later
    rename stays on one filesystem. It is removed again if the download fails.

    :param client: upstream client used for the request
    :param url: artifact URL
    :param target_dir: directory the artifact will be installed into
    :param project: project being downloaded, used to name the temp file
    :return: path of the completed temporary file
    :raises DownloadError: if the download fails
    :raises LocalStateError: if the temporary file cannot be created
    """
    try:
        fd, temp_name = tempfile.mkstemp(
            dir=target_dir,
            prefix=f".{project.api_name}-",
            suffix=TEMP_DOWNLOAD_SUFFIX,
        )
    except OSError as e:
        raise LocalStateError(f"Unable to create a file in {target_dir}: {e}") from e

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            size = client.download(url, fh)
    except BaseException:
        discard(temp_path)
        raise
    logger.debug(f"Downloaded {size} bytes from {url} to {temp_path}")
    return temp_path


def same_content_size(first: Path, second: Path) -> bool:
    try:
        return first.stat().st_size == second.stat().st_size
    except OSError:
        return False


def install_artifact(
    temp_path: Path, stale: Iterable[Path], target_dir: Path, filename: str
) -> Path:
    """
    Move a downloaded artifact into place, replacing the project's previous files.

    The move is an atomic rename. Only after it succeeded are the stale files
    of the same project deleted, so a failed install leaves the previous
    artifact untouched and a successful one leaves exactly one.

    Args:
        temp_path: Completed download
        stale: Currently installed artifacts of the same project
        target_dir: Install directory
        filename: Final filename of the artifact

    Returns:
        Path of the installed artifact

    Raises:
        LocalStateError: If the rename fails or a stale file cannot be removed
    """
    destination = target_dir / filename
    try:
        os.replace(temp_path, destination)
    except OSError as e:
        discard(temp_path)
        raise LocalStateError(f"Unable to install {filename}: {e}") from e
    logger.info(f"Installed {destination}")

    leftovers = []
    for path in stale:
        if path.name == filename or not path.exists():
            continue
        # Case-insensitive filesystems may report the new file under an old name
        if path.samefile(destination):
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Unable to remove previous artifact {path.name}: {e}")
            leftovers.append(path.name)
            continue
        logger.info(f"Removed previous artifact {path.name}")

    if leftovers:
        raise LocalStateError(
            f"Installed {filename} but could not remove {', '.join(leftovers)}"
        )
    return destination


def discard(path: Path) -> None:
    """Remove a temporary file, logging instead of raising on failure."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Unable to remove temporary file {path}: {e}")

