"""Entry point for the Serial Monitor PyQt application."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from PyQt6.QtWidgets import QApplication

from config.config_manager import AppConfig, ConfigManager
from config.constants import ApplicationConstants, LoggingConstants
from modules.serial_monitor import (
    IngestionPipeline,
    MonitorSession,
    PortNotFoundError,
    ProcessTransport,
    SerialTransport,
    StreamTransport,
    Transport,
    TransportError,
    find_default_port,
)
from ui.error_handler import ErrorCode, ErrorHandler, setup_exception_hook
from ui.serial_monitor_window import SerialMonitorWindow
from utils import common

logger = common.get_logger('serial_monitor')

__all__ = ["apply_overrides", "build_transport", "main", "parse_args"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=ApplicationConstants.APP_DESCRIPTION)
    parser.add_argument('--port', help='Serial port to open (default: configured or first available)')
    parser.add_argument('--baud', type=int, help='Baud rate')
    parser.add_argument('--timeout-ms', type=int, help='Serial read timeout in milliseconds')
    parser.add_argument('--capacity', type=int, help='Maximum lines kept per pane')
    parser.add_argument('--config', help='Path to the JSON configuration file')
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=LoggingConstants.LOG_LEVELS,
        help='Application log level',
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--stdin', action='store_true', help='Read the log stream from standard input')
    source.add_argument('--file', help='Replay a captured log file')
    source.add_argument('--command', help='Stream the stdout of a command, e.g. "adb logcat"')
    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Apply command-line overrides on top of the loaded configuration."""
    if args.port:
        config.serial.port = args.port
    if args.baud:
        config.serial.baud_rate = args.baud
    if args.timeout_ms:
        config.serial.read_timeout_ms = args.timeout_ms
    if args.capacity and args.capacity > 0:
        config.monitor.lane_capacity = args.capacity
    if args.log_level:
        config.logging.log_level = args.log_level
    return config


def build_transport(config: AppConfig, args: argparse.Namespace) -> Transport:
    """Open the byte source selected on the command line.

    Raises :class:`PortNotFoundError` or :class:`TransportError` when the
    source cannot be opened, and ``OSError`` for unreadable replay files.
    """
    if args.stdin:
        return StreamTransport(sys.stdin.buffer, description='stdin')
    if args.file:
        return StreamTransport(open(args.file, 'rb'), description=args.file)
    if args.command:
        return ProcessTransport(args.command)

    settings = config.serial
    port = settings.port or find_default_port()
    return SerialTransport(port, settings.baud_rate, settings.read_timeout_ms)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main application entry point."""
    args = parse_args(argv)
    config = apply_overrides(ConfigManager(args.config).load_config(), args)
    common.set_log_level(config.logging.log_level)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName(ApplicationConstants.APP_NAME)
    app.setApplicationVersion(ApplicationConstants.APP_VERSION)

    error_handler = ErrorHandler()
    setup_exception_hook(error_handler)

    try:
        transport = build_transport(config, args)
    except PortNotFoundError as exc:
        error_handler.handle_error(ErrorCode.PORT_NOT_FOUND, details=str(exc))
        print(str(exc), file=sys.stderr)
        return 1
    except TransportError as exc:
        error_handler.handle_error(ErrorCode.PORT_OPEN_FAILED, details=str(exc), exception=exc)
        print(str(exc), file=sys.stderr)
        return 1
    except OSError as exc:
        error_handler.handle_exception(exc, context=args.file)
        print(str(exc), file=sys.stderr)
        return 1

    monitor = config.monitor
    pipeline = IngestionPipeline(transport, read_size=config.serial.read_size)
    session = MonitorSession(
        pipeline,
        capacity=monitor.lane_capacity,
        main_percent=monitor.main_pane_percent,
        max_lines_per_tick=monitor.max_lines_per_tick,
    )

    window = SerialMonitorWindow(
        session,
        poll_interval_ms=monitor.poll_interval_ms,
        font_size=config.ui.font_size,
        source_description=transport.description,
        error_handler=error_handler,
    )
    window.resize(config.ui.window_width, config.ui.window_height)
    window.move(config.ui.window_x, config.ui.window_y)
    window.show()
    window.start()

    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
