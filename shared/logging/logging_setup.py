"""Logging for the retrieval bridge.

Console output is colored by level (or per message via ``color=``), the
optional log file gets plain lines. Timestamps are rendered in the zone
given by TIMEZONE.
"""

from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os
from logging import Logger

APP_LOGGER_NAME = "worknote_bridge"
# third-party loggers that only speak up in debug mode
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_ANSI_RESET = "\033[0m"
_COLOR_MAP: dict[str, str] = {
    "cyan":    "\033[36m",
    "green":   "\033[32m",
    "yellow":  "\033[33m",
    "red":     "\033[31m",
    "magenta": "\033[35m",
    "blue":    "\033[34m",
    "grey":    "\033[90m",
}
_LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "grey",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "magenta",
}
_LEVEL_MARKERS: dict[int, str] = {
    logging.WARNING: "⚠️ ",
    logging.ERROR: "⛔ ",
    logging.CRITICAL: "⛔ ",
}


def resolve_log_level() -> int:
    return logging.DEBUG if os.getenv("LOG_LEVEL", "info").lower() == "debug" else logging.INFO


class ZonedFormatter(logging.Formatter):
    """Formatter with timezone-aware timestamps and a marker in front of warnings and errors."""

    def __init__(self, tz_name: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()

    def format(self, record):
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # argument mismatch in a third-party log call; keep the raw template
            message = str(record.msg)

        # the record is shared between handlers, so work on a copy
        record = logging.makeLogRecord(record.__dict__)
        record.msg = _LEVEL_MARKERS.get(record.levelno, "") + message
        record.args = ()
        return super().format(record)


class ConsoleFormatter(ZonedFormatter):
    """ZonedFormatter plus ANSI colors. An explicit ``color`` on the record wins over the level color."""

    def format(self, record) -> str:
        line = super().format(record)
        color_name = getattr(record, "color", None) or _LEVEL_COLORS.get(record.levelno)
        ansi = _COLOR_MAP.get(color_name, "") if color_name else ""
        return f"{ansi}{line}{_ANSI_RESET}" if ansi and line else line


class ColorLogger:
    """Wrapper around :class:`logging.Logger` whose log methods accept ``color=``.

    Usage::

        logger.info("Reindex complete: %d succeeded", 12, color="green")
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def log(self, level: int, msg, *args, color: str | None = None, **kwargs):
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        kwargs.setdefault("stacklevel", 2)
        self._logger.log(level, msg, *args, **kwargs)

    def _log_from_caller(self, level: int, msg, args, kwargs):
        # skip log(), this helper and debug()/info()/..., so records point at their caller
        kwargs.setdefault("stacklevel", 4)
        self.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):
        self._log_from_caller(logging.DEBUG, msg, args, kwargs)

    def info(self, msg, *args, **kwargs):
        self._log_from_caller(logging.INFO, msg, args, kwargs)

    def warning(self, msg, *args, **kwargs):
        self._log_from_caller(logging.WARNING, msg, args, kwargs)

    def error(self, msg, *args, **kwargs):
        self._log_from_caller(logging.ERROR, msg, args, kwargs)

    def exception(self, msg, *args, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._log_from_caller(logging.ERROR, msg, args, kwargs)

    def __getattr__(self, name):
        """Everything else (setLevel, handlers, ...) comes from the wrapped logger."""
        return getattr(self._logger, name)


def build_logging_config(level: int, tz_name: str, log_file: str | None = None) -> dict:
    """Build the dictConfig for the console handler and an optional file handler.

    Args:
        level (int): Level for the root logger and all handlers.
        tz_name (str): pytz zone name used for timestamps.
        log_file (str | None): Path of the log file; None disables file logging.

    Returns:
        dict: A logging.config.dictConfig schema.
    """
    formatter_args = {
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
        "tz_name": tz_name,
    }
    handlers: dict = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "level": level,
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "plain",
            "level": level,
            "filename": log_file,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"()": ZonedFormatter, **formatter_args},
            "console": {"()": ConsoleFormatter, **formatter_args},
        },
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": level},
    }


def setup_logging(log_to_file: bool | None = None) -> ColorLogger:
    """Configure logging from LOG_LEVEL, TIMEZONE, LOG_TO_FILE and ROOT_DIR.

    Args:
        log_to_file (bool | None): Whether to write logs/app.log under ROOT_DIR
            (default: the working directory). Defaults to LOG_TO_FILE, true when unset.

    Returns:
        ColorLogger: The application logger.
    """
    level = resolve_log_level()
    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "true").lower() in ("true", "1", "yes")

    log_file = None
    if log_to_file:
        log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, "app.log")

    logging.config.dictConfig(build_logging_config(level, os.getenv("TIMEZONE", "Europe/Berlin"), log_file))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level == logging.DEBUG else logging.WARNING)

    return ColorLogger(logging.getLogger(APP_LOGGER_NAME))
