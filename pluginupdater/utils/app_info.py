from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from platformdirs import PlatformDirs

from pluginupdater.utils.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    HISTORY_FILE_NAME,
)


class AppInfo:
    """
    Singleton class that provides information about the application and its related directories.

    The directories are determined using the `platformdirs` package, so they follow
    platform-specific conventions. A data folder override (e.g. from the command line)
    can be applied once with `use_storage_folder`.

    Examples:
        >>> print(AppInfo().app_version)
        >>> print(AppInfo().config_file)
    """

    _instance: "None | AppInfo" = None

    def __new__(cls) -> "AppInfo":
        if not cls._instance:
            cls._instance = super(AppInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        self._app_name = APP_NAME
        try:
            self._app_version = version("pluginupdater")
        except PackageNotFoundError:
            self._app_version = "Unknown version"

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        self._app_storage_folder: Path = Path(platform_dirs.user_data_dir)
        self._user_log_folder: Path = Path(platform_dirs.user_log_dir)

        self._is_initialized: bool = True

    def use_storage_folder(self, folder: Path) -> None:
        """Point configuration, history and logs at a custom folder."""
        self._app_storage_folder = folder
        self._user_log_folder = folder / "logs"

    def ensure_folders(self) -> None:
        self._app_storage_folder.mkdir(parents=True, exist_ok=True)
        self._user_log_folder.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def app_version(self) -> str:
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """Folder holding config.json and history.log."""
        return self._app_storage_folder

    @property
    def user_log_folder(self) -> Path:
        return self._user_log_folder

    @property
    def config_file(self) -> Path:
        return self._app_storage_folder / CONFIG_FILE_NAME

    @property
    def history_file(self) -> Path:
        return self._app_storage_folder / HISTORY_FILE_NAME
