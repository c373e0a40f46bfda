from pathlib import Path

from loguru import logger

from pluginupdater.models.outcome import UpdateOutcome, VersionInfo
from pluginupdater.models.project import Project
from pluginupdater.models.settings import UpdateHistoryConfig

HISTORY_EXTRA_KEY = "history_sink"


def is_history_record(record: dict) -> bool:
    return HISTORY_EXTRA_KEY in record["extra"]


class UpdateHistory:
    """
    Append-only log of version checks, installs and failures.

    Entries go through loguru into a dedicated file sink that rotates once it
    grows past the configured size. Records are tagged with a bound extra so
    only this sink picks them up.
    """

    def __init__(self, config: UpdateHistoryConfig, log_file: Path) -> None:
        self.config = config
        self.log_file = log_file
        self._sink_id: int | None = None
        self._key = f"{id(self):x}"
        self._logger = logger.bind(**{HISTORY_EXTRA_KEY: self._key})

        if not config.enabled:
            return

        log_file.parent.mkdir(parents=True, exist_ok=True)
        self._sink_id = logger.add(
            log_file,
            level="INFO",
            format="[{time:YYYY-MM-DD HH:mm:ss}] [{extra[kind]}] {message}",
            filter=lambda record: record["extra"].get(HISTORY_EXTRA_KEY) == self._key,
            rotation=(
                f"{config.max_file_size_mb} MB"
                if config.max_file_size_mb > 0
                else None
            ),
            retention=1,
            encoding="utf-8",
        )

    @property
    def enabled(self) -> bool:
        return self._sink_id is not None

    def _write(self, kind: str, message: str) -> None:
        if self.enabled:
            self._logger.bind(kind=kind).info(message)

    def log_check(self, info: VersionInfo) -> None:
        if not self.config.log_checks or not info.enabled:
            return
        name = info.project.api_name
        if info.error:
            self._write("CHECK", f"{name}: check failed - {info.error}")
        elif info.update_available:
            self._write(
                "CHECK",
                f"{name}: update available {info.installed or 'not installed'}"
                f" -> {info.latest}",
            )
        else:
            self._write("CHECK", f"{name}: up to date ({info.installed})")

    def log_update(self, outcome: UpdateOutcome) -> None:
        if outcome.error:
            self.log_error(outcome.project, outcome.error)
        elif outcome.updated and self.config.log_updates:
            self._write("UPDATE", outcome.describe())

    def log_error(self, project: Project, message: str) -> None:
        if self.config.log_errors:
            self._write("ERROR", f"{project.api_name}: {message}")

    def close(self) -> None:
        if self._sink_id is not None:
            logger.remove(self._sink_id)
            self._sink_id = None
