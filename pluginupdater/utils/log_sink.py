import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from pluginupdater.utils.obfuscate_message import obfuscate_message
from pluginupdater.utils.update_history import is_history_record

if TYPE_CHECKING:
    import loguru


class LogSink(Protocol):
    """Where the engine reports progress. Hosts may supply their own."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str, cause: BaseException | None = None) -> None: ...


class LoguruLogSink:
    """Default sink forwarding to loguru."""

    def info(self, message: str) -> None:
        logger.info(message)

    def warn(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str, cause: BaseException | None = None) -> None:
        if cause is not None:
            logger.opt(exception=cause).error(message)
        else:
            logger.error(message)


def configure_logging(log_file: Path, debug: bool = False) -> None:
    """
    Replace loguru's default handler with a file sink and a WARNING stderr sink.

    The previous log file is kept as <name>.old.log. Update history records
    are written to their own sink and left out here.
    """
    old_log_file = log_file.with_name(f"{log_file.stem}.old.log")
    log_file.parent.mkdir(parents=True, exist_ok=True)
    if old_log_file.is_file():
        old_log_file.unlink()
    if log_file.is_file():
        log_file.rename(old_log_file)

    def formatter(record: "loguru.Record") -> str:
        """Custom formatter for loguru logger"""
        format_string = (
            "[{level}]"
            "[{time:YYYY-MM-DD HH:mm:ss}]"
            "[{process.id}]"
            "[{module}]"
            "[{function}][{line}]"
            " : "
        )

        record["extra"]["obfuscated_message"] = obfuscate_message(record["message"])
        return format_string + "{extra[obfuscated_message]}\n{exception}"

    def not_history(record: "loguru.Record") -> bool:
        return not is_history_record(record)

    logger.remove()
    logger.add(
        log_file,
        level="DEBUG" if debug else "INFO",
        format=formatter,
        filter=not_history,
        encoding="utf-8",
    )
    logger.add(
        sys.stderr,
        level="WARNING",
        format=formatter,
        filter=not_history,
        colorize=False,
    )
