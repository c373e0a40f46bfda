class UpdaterError(Exception):
    """Base exception for plugin update errors."""

    pass


class ResolutionError(UpdaterError):
    """
    Raised when the latest artifact of a project cannot be determined
    from its upstream source.
    """

    pass


class UnsupportedPlatformError(ResolutionError):
    """Raised when a project has no build for the requested platform."""

    pass


class DownloadError(UpdaterError):
    """Raised when an artifact download fails."""

    pass


class LocalStateError(UpdaterError):
    """Raised when the install directory cannot be read or prepared."""

    pass


class ParentNotInstalledError(LocalStateError):
    """
    Raised when an extension is requested but the add-on
    that hosts it is not installed.
    """

    pass


class CleanupMarkerError(UpdaterError):
    """Raised when the deferred cleanup marker cannot be created."""

    pass


class ConfigError(UpdaterError):
    """Raised when the configuration file cannot be read or written."""

    pass
