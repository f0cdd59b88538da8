import argparse
import logging as logging_module
from pathlib import Path
import signal
import sys
import time
import tomllib
from typing import NoReturn, TypedDict, cast

from window_beacon.journal.event_journal import EventJournal
from window_beacon.logging import (
    get_default_log_dir,
    get_level_name,
    get_logger,
    set_console_level,
    setup_logging,
)
from window_beacon.monitor.event_monitor import (
    DEFAULT_POLL_INTERVAL_MS,
    MonitorConfig,
    WindowEventMonitor,
)
from window_beacon.window_tracking.data import WindowEvent

logger = get_logger("window_beacon")


class MonitorSectionConfig(TypedDict, total=False):
    interval_ms: int
    journal: str


class GeneralSectionConfig(TypedDict, total=False):
    debug: bool


class FileConfig(TypedDict):
    monitor: MonitorSectionConfig
    general: GeneralSectionConfig


class CliArgs(TypedDict):
    interval_ms: int
    journal: Path | None
    debug: bool
    config: Path


class RunSettings(TypedDict):
    interval_ms: int
    journal: Path | None
    debug: bool


def parse_args(argv: list[str] | None = None) -> CliArgs:
    parser = argparse.ArgumentParser(
        prog="window-beacon",
        description="WindowBeacon - watch macOS windows and report lifecycle events",
    )

    parser.add_argument(
        "--interval-ms",
        type=int,
        default=DEFAULT_POLL_INTERVAL_MS,
        help=f"Polling interval in milliseconds (default: {DEFAULT_POLL_INTERVAL_MS})",
    )

    parser.add_argument(
        "--journal",
        type=Path,
        default=None,
        help="Append every window event to this JSONL file",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose console output and log file)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path.home() / ".config" / "window-beacon" / "config.toml",
        help="Path to configuration file (default: ~/.config/window-beacon/config.toml)",
    )

    parsed = parser.parse_args(argv)

    return cast(
        "CliArgs",
        {
            "interval_ms": parsed.interval_ms,
            "journal": parsed.journal,
            "debug": parsed.debug,
            "config": parsed.config,
        },
    )


def load_config(config_path: Path) -> FileConfig:
    """Load the ``[monitor]`` and ``[general]`` sections of a TOML file.

    A missing or unreadable file yields empty sections.
    """
    config: FileConfig = {"monitor": {}, "general": {}}

    if not config_path.exists():
        logger.debug("Config file not found: %s", config_path)
        return config

    try:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
        logger.info("Loaded configuration from: %s", config_path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file: %s", e)
        return config

    if isinstance(raw_config.get("monitor"), dict):
        config["monitor"] = raw_config["monitor"]  # type: ignore[typeddict-item]
    if isinstance(raw_config.get("general"), dict):
        config["general"] = raw_config["general"]  # type: ignore[typeddict-item]

    return config


def merge_config(cli_args: CliArgs, file_config: FileConfig) -> RunSettings:
    """Overlay file configuration on the CLI values."""
    settings: RunSettings = {
        "interval_ms": cli_args["interval_ms"],
        "journal": cli_args["journal"],
        "debug": cli_args["debug"],
    }

    monitor_config = file_config["monitor"]
    if "interval_ms" in monitor_config:
        settings["interval_ms"] = int(monitor_config["interval_ms"])
    if "journal" in monitor_config:
        settings["journal"] = Path(monitor_config["journal"])

    general_config = file_config["general"]
    if "debug" in general_config:
        settings["debug"] = bool(general_config["debug"])

    return settings


def configure_logging(*, debug_mode: bool, log_dir: Path | None = None) -> None:
    if not debug_mode:
        log_dir = None
    elif log_dir is None:
        log_dir = get_default_log_dir()

    setup_logging(log_dir)

    console_level = logging_module.DEBUG if debug_mode else logging_module.INFO
    set_console_level(console_level)
    logger.info("Console log level: %s", get_level_name(console_level))
    if log_dir is not None:
        logger.info("Writing debug log to: %s", log_dir)


def log_event(event: WindowEvent) -> None:
    window = event.window
    logger.info(
        "%s: %s [%s pid=%d] at (%d, %d) %dx%d",
        event.type,
        window.title,
        window.app_name,
        window.pid,
        window.bounds.x,
        window.bounds.y,
        window.bounds.width,
        window.bounds.height,
    )


def create_monitor(settings: RunSettings) -> WindowEventMonitor:
    monitor = WindowEventMonitor(
        config=MonitorConfig(poll_interval_ms=settings["interval_ms"])
    )
    monitor.subscribe(log_event)
    if settings["journal"] is not None:
        monitor.subscribe(EventJournal(settings["journal"]))
    return monitor


def main() -> NoReturn:
    """Main entry point for the application."""
    args = parse_args()
    settings = merge_config(args, load_config(args["config"]))

    configure_logging(debug_mode=settings["debug"])

    if settings["interval_ms"] <= 0:
        logger.error(
            "Polling interval must be positive, got %d", settings["interval_ms"]
        )
        sys.exit(2)

    logger.info("Starting WindowBeacon")
    logger.info("Polling interval: %d ms", settings["interval_ms"])
    if settings["journal"] is not None:
        logger.info("Event journal: %s", settings["journal"])

    monitor = create_monitor(settings)

    shutdown_requested = False

    def handle_shutdown(signum: int, frame: object) -> None:  # noqa: ARG001
        nonlocal shutdown_requested
        sig_name = signal.Signals(signum).name
        logger.info("Received %s signal, shutting down gracefully...", sig_name)
        shutdown_requested = True

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    try:
        monitor.start()
        logger.info("WindowBeacon is running. Press Ctrl+C to stop.")

        while not shutdown_requested:
            time.sleep(0.2)

    except Exception as e:  # noqa: BLE001
        logger.error("Unexpected error: %s", e)
        monitor.stop()
        sys.exit(1)

    monitor.stop()
    logger.info("Shutdown complete")
    sys.exit(0)


if __name__ == "__main__":
    main()
