"""
Deferred cleanup of the GeyserModelEngine extension folder.

The folder mixes user supplied models (input/) with generated resource
packs. Generated files are still held open by the running server when the
extension is updated, so the update only drops a marker file and the next
startup sweeps everything except user input, jars and the marker itself.
"""

import os
import shutil
from errno import EACCES
from pathlib import Path
from stat import S_IRWXG, S_IRWXO, S_IRWXU
from typing import Any, Callable

from loguru import logger

from pluginupdater.utils.constants import (
    ARTIFACT_EXTENSION,
    CLEANUP_MARKER_NAME,
    CLEANUP_PRESERVED_NAMES,
    MODEL_ENGINE_FALLBACK_TOKENS,
    MODEL_ENGINE_FOLDER_NAMES,
)
from pluginupdater.utils.exception import CleanupMarkerError


def find_model_engine_folder(extensions_folder: Path) -> Path | None:
    """
    Locate the GeyserModelEngine data folder inside the Geyser extensions folder.

    Known folder names are tried first, then the first directory (by name)
    whose lowercase name mentions both "modelengine" and "pack".
    """
    if not extensions_folder.is_dir():
        return None

    for name in MODEL_ENGINE_FOLDER_NAMES:
        candidate = extensions_folder / name
        if candidate.is_dir():
            return candidate

    try:
        children = sorted(extensions_folder.iterdir())
    except OSError as e:
        logger.warning(f"Unable to list {extensions_folder}: {e}")
        return None
    for child in children:
        lowered = child.name.lower()
        if child.is_dir() and all(t in lowered for t in MODEL_ENGINE_FALLBACK_TOKENS):
            return child
    return None


def create_cleanup_marker(folder: Path | None) -> Path:
    """
    Schedule a cleanup of the folder for the next startup.

    :param folder: GeyserModelEngine data folder
    :return: path of the created marker
    :raises CleanupMarkerError: if the folder is missing or a cleanup is already scheduled
    """
    if folder is None or not folder.is_dir():
        raise CleanupMarkerError("GeyserModelEngine folder not found")

    marker = folder / CLEANUP_MARKER_NAME
    try:
        # Exclusive create fails if a cleanup is already pending
        with open(marker, "x"):
            pass
    except FileExistsError as e:
        raise CleanupMarkerError(f"Cleanup already pending in {folder}") from e
    except OSError as e:
        raise CleanupMarkerError(f"Unable to create {marker}: {e}") from e
    logger.info(f"Scheduled cleanup of {folder} for next startup")
    return marker


def is_cleanup_pending(folder: Path | None) -> bool:
    return folder is not None and (folder / CLEANUP_MARKER_NAME).is_file()


def _is_preserved(entry: Path) -> bool:
    if entry.name in CLEANUP_PRESERVED_NAMES:
        return True
    return entry.is_file() and entry.name.lower().endswith(ARTIFACT_EXTENSION)


def attempt_chmod(
    func: Callable[[str], Any], path: str, excinfo: BaseException
) -> None:
    """
    onexc handler for shutil.rmtree: retry once after making the path writable,
    otherwise log and carry on with the rest of the tree.
    """
    if (
        isinstance(excinfo, OSError)
        and func in (os.rmdir, os.remove, os.unlink)
        and excinfo.errno == EACCES
    ):
        try:
            os.chmod(path, S_IRWXU | S_IRWXG | S_IRWXO)
            func(path)
            return
        except OSError as e:
            logger.warning(f"Retry of {func.__name__} failed at {path}: {e}")
            return
    logger.warning(f"Failed to delete {path}: {excinfo}")


def sweep_pending_cleanup(folder: Path | None) -> int | None:
    """
    Run a scheduled cleanup of the folder, if one is pending.

    Every immediate child except input/, jars and the marker is removed,
    directories recursively. Individual failures are logged and skipped.
    The marker is removed last.

    Args:
        folder: GeyserModelEngine data folder

    Returns:
        Number of removed entries, or None when no cleanup was pending
    """
    if folder is None or not is_cleanup_pending(folder):
        return None

    logger.info(f"Running pending cleanup in {folder}")
    try:
        entries = sorted(folder.iterdir())
    except OSError as e:
        logger.error(f"Unable to list {folder}, cleanup postponed: {e}")
        return None

    removed = 0
    for entry in entries:
        if _is_preserved(entry):
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry, onexc=attempt_chmod)
            else:
                entry.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete {entry}: {e}")
            continue
        if not entry.exists():
            removed += 1
            logger.debug(f"Deleted: {entry}")

    try:
        (folder / CLEANUP_MARKER_NAME).unlink()
    except OSError as e:
        logger.error(f"Unable to remove cleanup marker in {folder}: {e}")
    logger.info(f"Cleanup of {folder} removed {removed} entries")
    return removed
