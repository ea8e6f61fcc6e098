import logging
import logging.config
import os
import sys

APP_LOGGER = "budget_buddy"
ACCESS_LOGGER = f"{APP_LOGGER}.access"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILENAME = "budget_buddy.log"

# Third-party libraries only reach the handlers at WARNING and above.
_LIBRARY_LEVEL = "WARNING"


class ColourizedFormatter(logging.Formatter):
    """
    Formatter that colours the level name when writing to a terminal.
    """
    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[90m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colours: bool | None = None):
        super().__init__(fmt, datefmt)
        self.use_colours = sys.stdout.isatty() if use_colours is None else use_colours

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802 (logging API)
        colour = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_colours or not colour:
            return super().formatMessage(record)
        # Work on a copy: the same record still goes to the plain file handler.
        coloured = logging.makeLogRecord(record.__dict__)
        coloured.levelname = f"{colour}{record.levelname}{self.RESET}"
        return super().formatMessage(coloured)


def resolve_level(level: str | None = None) -> str:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if not isinstance(logging.getLevelName(name), int):
        return "INFO"
    return name


def get_logging_config(level: str | None = None) -> dict:
    """Build the ``dictConfig`` used by the app and by uvicorn.

    Application loggers live under ``budget_buddy`` and follow ``LOG_LEVEL``;
    everything else is held at WARNING. Request lines come from the
    ``budget_buddy.access`` logger, so uvicorn's own access log is muted.
    """
    handler_names = ["console"]
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "colour",
        },
    }
    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, LOG_FILENAME),
            "formatter": "plain",
        }
        handler_names.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colour": {
                "()": "budget_buddy.logger.ColourizedFormatter",
                "fmt": LOG_FORMAT,
            },
            "plain": {
                "format": LOG_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": handler_names,
            "level": _LIBRARY_LEVEL,
        },
        "loggers": {
            APP_LOGGER: {"level": resolve_level(level)},
            ACCESS_LOGGER: {"level": "INFO"},
            "uvicorn": {"level": "INFO"},
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {"level": _LIBRARY_LEVEL},
        },
    }


def setup_logging(level: str | None = None) -> None:
    logging.config.dictConfig(get_logging_config(level))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
