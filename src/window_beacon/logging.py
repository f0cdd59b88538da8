from datetime import datetime
import logging
from pathlib import Path
import sys
from typing import Literal

COMPONENT_LOGGERS: dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

COMPONENTS = (
    "window_beacon",
    "window_beacon.window_tracking",
    "window_beacon.monitor",
    "window_beacon.journal",
)


def get_default_log_dir() -> Path:
    """Return the default log directory: ~/.logs/window-beacon/"""
    return Path.home() / ".logs" / "window-beacon"


def _with_format(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _daily_log_file(log_dir: Path) -> Path:
    log_dir = log_dir.expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"window-beacon-{datetime.now().strftime('%Y-%m-%d')}.log"


def get_logger(name: str, log_dir: Path | None = None) -> logging.Logger:
    """Return the cached logger for a component, creating it on first use.

    Console output goes to stdout at INFO. When ``log_dir`` is given, DEBUG
    and above is also written to a per-day file in that directory.
    """
    if name in COMPONENT_LOGGERS:
        return COMPONENT_LOGGERS[name]

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    if log_dir is not None:
        file_handler = logging.FileHandler(_daily_log_file(log_dir), encoding="utf-8")
        logger.addHandler(_with_format(file_handler, logging.DEBUG))

    logger.addHandler(_with_format(logging.StreamHandler(sys.stdout), logging.INFO))

    COMPONENT_LOGGERS[name] = logger
    return logger


def setup_logging(log_dir: Path | None = None) -> dict[str, logging.Logger]:
    return {component: get_logger(component, log_dir) for component in COMPONENTS}


def set_console_level(level: int) -> None:
    """Change the stdout threshold of every component logger created so far."""
    for logger in COMPONENT_LOGGERS.values():
        for handler in logger.handlers:
            # FileHandler subclasses StreamHandler but keeps its own level
            if isinstance(handler, logging.StreamHandler) and not isinstance(
                handler, logging.FileHandler
            ):
                handler.setLevel(level)


def reset_component_loggers() -> None:
    """Close and detach every handler added by get_logger and empty the cache."""
    for logger in COMPONENT_LOGGERS.values():
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
    COMPONENT_LOGGERS.clear()


def get_level_name(
    level: int,
) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
    return logging.getLevelName(level)  # type: ignore[return-value]
