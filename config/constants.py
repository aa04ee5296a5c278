"""Application constants and configuration values."""


class UIConstants:
    """UI-related constants."""

    # Window dimensions
    WINDOW_WIDTH = 1000
    WINDOW_HEIGHT = 700
    WINDOW_MIN_WIDTH = 480
    WINDOW_MIN_HEIGHT = 320

    # Render tick; doubles as the input poll bound and redraw rate
    POLL_INTERVAL_MS = 100

    # Pane split (percent of the available rows given to the main lane)
    MAIN_PANE_PERCENT = 80

    FONT_FAMILY = 'Monospace'
    FONT_SIZE = 10

    MAIN_TEXT_COLOR = '#4caf50'
    PANE_BACKGROUND = '#1e1e1e'


class SerialConstants:
    """Transport defaults."""

    DEFAULT_BAUD_RATE = 115200
    READ_TIMEOUT_MS = 1000
    READ_SIZE = 1024


class BufferConstants:
    """Lane storage limits."""

    LANE_CAPACITY = 1000
    MIN_LANE_CAPACITY = 10
    # 0 drains everything queued on each tick
    MAX_LINES_PER_TICK = 0


class KeyBindings:
    """Keyboard shortcuts mapped to navigation command names."""

    SCROLL_MAIN_UP = 'Up'
    SCROLL_MAIN_DOWN = 'Down'
    RESUME_MAIN_FOLLOW = 'A'
    SCROLL_ALERT_UP = 'S'
    SCROLL_ALERT_DOWN = 'W'
    RESUME_ALERT_FOLLOW = 'D'
    QUIT = 'Q'


class LoggingConstants:
    """Logging configuration constants."""

    DEFAULT_LOG_LEVEL = 'INFO'
    LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    # Project loggers
    RELATED_LOGGERS = [
        'config_manager',
        'error_handler',
        'serial_buffer',
        'serial_monitor',
        'serial_monitor_window',
        'serial_pipeline',
        'serial_session',
        'serial_transport',
    ]


class ApplicationConstants:
    """General application constants."""

    APP_NAME = "Serial Monitor"
    APP_VERSION = "1.0.0"
    APP_DESCRIPTION = "Live serial log viewer with a separate error and warning pane"


class PanelText:
    """Shared labels and titles for UI panels."""

    TITLE_MAIN = 'Serial Monitor'
    TITLE_ALERT = 'Errors and Warnings'

    STATUS_FOLLOWING = 'following'
    STATUS_MANUAL = 'manual'
    STATUS_CONNECTED = 'Reading from {source}'
    STATUS_STREAM_ENDED = 'Stream ended'
    STATUS_STREAM_FAILED = 'Stream ended: {reason}'

    HELP_KEYS = (
        'Main: Up/Down scroll, A follow  |  '
        'Alerts: S/W scroll, D follow  |  Q quit'
    )
