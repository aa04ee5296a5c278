"""Unified error handling module for the application."""

import sys
import traceback
from enum import Enum
from typing import Optional, Callable, Dict, Any
from dataclasses import dataclass, replace

from PyQt6.QtWidgets import QMessageBox, QWidget
from PyQt6.QtCore import QObject, pyqtSignal

from modules.serial_monitor.errors import PortNotFoundError, TransportClosed, TransportError
from utils import common

logger = common.get_logger('error_handler')


class ErrorLevel(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(Enum):
    """Standardized error codes."""
    # Port errors
    PORT_NOT_FOUND = "PORT_NOT_FOUND"
    PORT_OPEN_FAILED = "PORT_OPEN_FAILED"

    # Stream errors
    STREAM_ENDED = "STREAM_ENDED"
    STREAM_READ_FAILED = "STREAM_READ_FAILED"

    # File errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_PERMISSION_DENIED = "FILE_PERMISSION_DENIED"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # Generic errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorInfo:
    """Structured error information."""
    code: ErrorCode
    message: str
    level: ErrorLevel
    details: Optional[str] = None
    suggestion: Optional[str] = None
    technical_info: Optional[str] = None


ERROR_TEMPLATES: Dict[ErrorCode, ErrorInfo] = {
    ErrorCode.PORT_NOT_FOUND: ErrorInfo(
        code=ErrorCode.PORT_NOT_FOUND,
        message="No available serial ports",
        level=ErrorLevel.ERROR,
        suggestion="Connect the device or pass --port explicitly"
    ),
    ErrorCode.PORT_OPEN_FAILED: ErrorInfo(
        code=ErrorCode.PORT_OPEN_FAILED,
        message="Failed to open serial port",
        level=ErrorLevel.ERROR,
        suggestion="Check that no other program holds the port and that you have access to it"
    ),
    ErrorCode.STREAM_ENDED: ErrorInfo(
        code=ErrorCode.STREAM_ENDED,
        message="Input stream ended",
        level=ErrorLevel.INFO,
    ),
    ErrorCode.STREAM_READ_FAILED: ErrorInfo(
        code=ErrorCode.STREAM_READ_FAILED,
        message="Reading from the device failed",
        level=ErrorLevel.WARNING,
        suggestion="Buffered lines remain available; reconnect the device and restart"
    ),
    ErrorCode.FILE_NOT_FOUND: ErrorInfo(
        code=ErrorCode.FILE_NOT_FOUND,
        message="Required file not found",
        level=ErrorLevel.ERROR,
        suggestion="Check file path and permissions"
    ),
    ErrorCode.FILE_PERMISSION_DENIED: ErrorInfo(
        code=ErrorCode.FILE_PERMISSION_DENIED,
        message="Permission denied accessing file",
        level=ErrorLevel.ERROR,
        suggestion="Run with appropriate permissions or change file location"
    ),
}


class ErrorHandler(QObject):
    """Centralized error handling system."""

    error_occurred = pyqtSignal(object)  # ErrorInfo

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.parent_widget = parent
        self.error_handlers: Dict[ErrorCode, Callable] = {}
        self.error_count = 0

    def set_parent_widget(self, widget: Optional[QWidget]):
        """Use ``widget`` as the parent of error dialogs."""
        self.parent_widget = widget

    def build_error(self, error_code: ErrorCode, details: Optional[str] = None,
                    exception: Optional[BaseException] = None) -> ErrorInfo:
        """Return a fresh ErrorInfo for ``error_code`` filled with details."""
        template = ERROR_TEMPLATES.get(error_code, ErrorInfo(
            code=error_code,
            message=f"Error occurred: {error_code.value}",
            level=ErrorLevel.ERROR
        ))
        error_info = replace(template, details=details)
        if exception is not None:
            error_info.technical_info = f"{type(exception).__name__}: {exception}"
            if error_info.level in (ErrorLevel.ERROR, ErrorLevel.CRITICAL):
                error_info.technical_info += "\n" + "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )
        return error_info

    def handle_error(self, error_code: ErrorCode, details: Optional[str] = None,
                     exception: Optional[BaseException] = None,
                     context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
        """Handle an error with the specified code."""
        self.error_count += 1
        error_info = self.build_error(error_code, details, exception)

        self._log_error(error_info, context)
        self.error_occurred.emit(error_info)

        if error_code in self.error_handlers:
            try:
                self.error_handlers[error_code](error_info, context)
            except Exception as handler_error:
                logger.error(f"Error handler failed: {handler_error}")

        if error_info.level in (ErrorLevel.ERROR, ErrorLevel.CRITICAL):
            self._show_error_dialog(error_info)

        return error_info

    def _log_error(self, error_info: ErrorInfo, context: Optional[Dict[str, Any]] = None):
        """Log error information."""
        log_message = f"[{error_info.code.value}] {error_info.message}"

        if error_info.details:
            log_message += f" - Details: {error_info.details}"

        if context:
            log_message += f" - Context: {context}"

        if error_info.technical_info:
            log_message += f"\nTechnical: {error_info.technical_info}"

        if error_info.level == ErrorLevel.INFO:
            logger.info(log_message)
        elif error_info.level == ErrorLevel.WARNING:
            logger.warning(log_message)
        elif error_info.level == ErrorLevel.ERROR:
            logger.error(log_message)
        else:
            logger.critical(log_message)

    def _show_error_dialog(self, error_info: ErrorInfo):
        """Show error dialog to user."""
        if not self.parent_widget:
            return

        message = error_info.message
        if error_info.details:
            message += f"\n\nDetails: {error_info.details}"
        if error_info.suggestion:
            message += f"\n\nSuggestion: {error_info.suggestion}"

        msg_box = QMessageBox(self.parent_widget)
        msg_box.setIcon(QMessageBox.Icon.Critical)
        msg_box.setWindowTitle("Critical Error" if error_info.level == ErrorLevel.CRITICAL else "Error")
        msg_box.setText(message)
        if error_info.technical_info:
            msg_box.setDetailedText(error_info.technical_info)
        msg_box.exec()

    def register_error_handler(self, error_code: ErrorCode, handler: Callable):
        """Register custom error handler for specific error code."""
        self.error_handlers[error_code] = handler
        logger.debug(f"Registered custom handler for {error_code.value}")

    def handle_exception(self, exception: BaseException, context: Optional[str] = None) -> ErrorInfo:
        """Handle generic exceptions."""
        return self.handle_error(
            error_code=map_exception_to_error_code(exception),
            details=context or str(exception),
            exception=exception
        )


def map_exception_to_error_code(exception: BaseException) -> ErrorCode:
    """Map exceptions to error codes, most specific class first."""
    exception_mapping = (
        (PortNotFoundError, ErrorCode.PORT_NOT_FOUND),
        (TransportClosed, ErrorCode.STREAM_ENDED),
        (TransportError, ErrorCode.STREAM_READ_FAILED),
        (FileNotFoundError, ErrorCode.FILE_NOT_FOUND),
        (PermissionError, ErrorCode.FILE_PERMISSION_DENIED),
        (ValueError, ErrorCode.CONFIG_INVALID),
    )
    for exc_type, code in exception_mapping:
        if isinstance(exception, exc_type):
            return code
    return ErrorCode.UNKNOWN_ERROR


def setup_exception_hook(handler: ErrorHandler):
    """Route unhandled exceptions through ``handler``."""
    def exception_hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        handler.handle_exception(exc_value, "Unhandled exception")

    sys.excepthook = exception_hook
