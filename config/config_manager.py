"""Configuration management module for application settings."""

import json
import shutil
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from pathlib import Path

from config.constants import BufferConstants, LoggingConstants, SerialConstants, UIConstants
from utils import common

logger = common.get_logger('config_manager')


@dataclass
class UISettings:
    """UI configuration settings."""
    window_width: int = UIConstants.WINDOW_WIDTH
    window_height: int = UIConstants.WINDOW_HEIGHT
    window_x: int = 100
    window_y: int = 100
    font_size: int = UIConstants.FONT_SIZE


@dataclass
class SerialSettings:
    """Transport settings."""
    port: str = ''
    baud_rate: int = SerialConstants.DEFAULT_BAUD_RATE
    read_timeout_ms: int = SerialConstants.READ_TIMEOUT_MS
    read_size: int = SerialConstants.READ_SIZE


@dataclass
class MonitorSettings:
    """Buffer and viewport tuning."""
    lane_capacity: int = BufferConstants.LANE_CAPACITY
    main_pane_percent: int = UIConstants.MAIN_PANE_PERCENT
    poll_interval_ms: int = UIConstants.POLL_INTERVAL_MS
    max_lines_per_tick: int = BufferConstants.MAX_LINES_PER_TICK


@dataclass
class LoggingSettings:
    """Logging configuration."""
    log_level: str = LoggingConstants.DEFAULT_LOG_LEVEL


@dataclass
class AppConfig:
    """Main application configuration."""
    ui: UISettings
    serial: SerialSettings
    monitor: MonitorSettings
    logging: LoggingSettings
    version: str = "1.0.0"


class ConfigManager:
    """Manages application configuration persistence and validation."""

    DEFAULT_CONFIG_PATH = '~/.serial_monitor_config.json'
    BACKUP_CONFIG_PATH = '~/.serial_monitor_config.backup.json'

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH).expanduser()
        if config_path:
            self.backup_path = self.config_path.with_name(self.config_path.stem + '.backup.json')
        else:
            self.backup_path = Path(self.BACKUP_CONFIG_PATH).expanduser()
        self._config: Optional[AppConfig] = None
        self._ensure_config_dir()

    def _ensure_config_dir(self):
        """Ensure configuration directory exists."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_default_config(self) -> AppConfig:
        """Create default configuration."""
        return AppConfig(
            ui=UISettings(),
            serial=SerialSettings(),
            monitor=MonitorSettings(),
            logging=LoggingSettings(),
        )

    def _validate_config(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration dictionary."""
        default_config = asdict(self._create_default_config())

        # Merge with defaults for missing keys; unknown keys are dropped
        def merge_dict(default: Dict, user: Dict) -> Dict:
            result = default.copy()
            for key, value in user.items():
                if key in result:
                    if isinstance(value, dict) and isinstance(result[key], dict):
                        result[key] = merge_dict(result[key], value)
                    elif not isinstance(result[key], dict):
                        result[key] = value
            return result

        validated = merge_dict(default_config, config_dict)

        serial_settings = validated['serial']
        if not isinstance(serial_settings.get('port'), str):
            serial_settings['port'] = ''
            logger.warning('Serial port invalid, reset to auto-detect')
        if not isinstance(serial_settings.get('baud_rate'), int) or serial_settings['baud_rate'] <= 0:
            serial_settings['baud_rate'] = SerialConstants.DEFAULT_BAUD_RATE
            logger.warning('Baud rate invalid, reset to %s', SerialConstants.DEFAULT_BAUD_RATE)
        if not isinstance(serial_settings.get('read_timeout_ms'), int) or serial_settings['read_timeout_ms'] < 10:
            serial_settings['read_timeout_ms'] = SerialConstants.READ_TIMEOUT_MS
            logger.warning('Read timeout too low, reset to %s ms', SerialConstants.READ_TIMEOUT_MS)
        if not isinstance(serial_settings.get('read_size'), int) or serial_settings['read_size'] < 1:
            serial_settings['read_size'] = SerialConstants.READ_SIZE
            logger.warning('Read size invalid, reset to %s', SerialConstants.READ_SIZE)

        monitor_settings = validated['monitor']
        capacity = monitor_settings.get('lane_capacity')
        if not isinstance(capacity, int) or capacity < BufferConstants.MIN_LANE_CAPACITY:
            monitor_settings['lane_capacity'] = BufferConstants.LANE_CAPACITY
            logger.warning('Lane capacity too low, reset to %s', BufferConstants.LANE_CAPACITY)
        percent = monitor_settings.get('main_pane_percent')
        if not isinstance(percent, int) or not 10 <= percent <= 90:
            monitor_settings['main_pane_percent'] = UIConstants.MAIN_PANE_PERCENT
            logger.warning('Main pane percent out of range, reset to %s', UIConstants.MAIN_PANE_PERCENT)
        interval = monitor_settings.get('poll_interval_ms')
        if not isinstance(interval, int) or interval < 10:
            monitor_settings['poll_interval_ms'] = UIConstants.POLL_INTERVAL_MS
            logger.warning('Poll interval too low, reset to %s ms', UIConstants.POLL_INTERVAL_MS)
        per_tick = monitor_settings.get('max_lines_per_tick')
        if not isinstance(per_tick, int) or per_tick < 0:
            monitor_settings['max_lines_per_tick'] = BufferConstants.MAX_LINES_PER_TICK
            logger.warning('Lines per tick invalid, reset to unlimited')

        logging_settings = validated['logging']
        if str(logging_settings.get('log_level', '')).upper() not in LoggingConstants.LOG_LEVELS:
            logging_settings['log_level'] = LoggingConstants.DEFAULT_LOG_LEVEL
            logger.warning('Log level invalid, reset to %s', LoggingConstants.DEFAULT_LOG_LEVEL)

        return validated

    def _build_config(self, validated_dict: Dict[str, Any]) -> AppConfig:
        return AppConfig(
            ui=UISettings(**validated_dict['ui']),
            serial=SerialSettings(**validated_dict['serial']),
            monitor=MonitorSettings(**validated_dict['monitor']),
            logging=LoggingSettings(**validated_dict['logging']),
            version=validated_dict.get('version', '1.0.0'),
        )

    def _read_config_file(self, path: Path) -> AppConfig:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = json.load(f)
        if not isinstance(config_dict, dict):
            raise ValueError(f'{path} does not contain a JSON object')
        return self._build_config(self._validate_config(config_dict))

    def load_config(self) -> AppConfig:
        """Load configuration from file."""
        if self._config is not None:
            return self._config

        try:
            if self.config_path.exists():
                self._config = self._read_config_file(self.config_path)
                logger.info(f'Configuration loaded from {self.config_path}')
            else:
                self._config = self._create_default_config()
                logger.info('Created default configuration')

        except (OSError, ValueError, TypeError) as e:
            logger.error(f'Failed to load config: {e}')
            # Try backup if available
            if self.backup_path.exists():
                try:
                    logger.info('Attempting to load from backup')
                    self._config = self._read_config_file(self.backup_path)
                    logger.info('Configuration loaded from backup')
                except (OSError, ValueError, TypeError) as backup_error:
                    logger.error(f'Backup config also failed: {backup_error}')
                    self._config = self._create_default_config()
            else:
                self._config = self._create_default_config()

        return self._config

    def save_config(self, config: Optional[AppConfig] = None):
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            logger.warning('No configuration to save')
            return

        try:
            # Create backup of existing config
            if self.config_path.exists():
                try:
                    shutil.copy2(self.config_path, self.backup_path)
                except OSError as e:
                    logger.warning(f'Failed to create config backup: {e}')

            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(config), f, indent=4, ensure_ascii=False)

            self._config = config
            logger.info(f'Configuration saved to {self.config_path}')

        except OSError as e:
            logger.error(f'Failed to save config: {e}')
            raise

    def get_ui_settings(self) -> UISettings:
        """Get UI settings."""
        return self.load_config().ui

    def get_serial_settings(self) -> SerialSettings:
        """Get transport settings."""
        return self.load_config().serial

    def get_monitor_settings(self) -> MonitorSettings:
        """Get buffer and viewport settings."""
        return self.load_config().monitor

    def get_logging_settings(self) -> LoggingSettings:
        """Get logging settings."""
        return self.load_config().logging

    def update_ui_settings(self, **kwargs):
        """Update UI settings."""
        self._update_section('ui', kwargs)

    def update_serial_settings(self, **kwargs):
        """Update transport settings."""
        self._update_section('serial', kwargs)

    def update_monitor_settings(self, **kwargs):
        """Update buffer and viewport settings."""
        self._update_section('monitor', kwargs)

    def _update_section(self, section: str, values: Dict[str, Any]):
        config = self.load_config()
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)
        self.save_config(config)

    def reset_to_defaults(self):
        """Reset configuration to defaults."""
        self._config = self._create_default_config()
        self.save_config()
        logger.info('Configuration reset to defaults')

    def export_config(self, filepath: str):
        """Export configuration to file."""
        config = self.load_config()
        export_path = Path(filepath).expanduser()

        try:
            with open(export_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(config), f, indent=4, ensure_ascii=False)
            logger.info(f'Configuration exported to {export_path}')
        except OSError as e:
            logger.error(f'Failed to export config: {e}')
            raise

    def import_config(self, filepath: str):
        """Import configuration from file."""
        import_path = Path(filepath).expanduser()

        try:
            imported_config = self._read_config_file(import_path)
            self.save_config(imported_config)
            logger.info(f'Configuration imported from {import_path}')
        except (OSError, ValueError, TypeError) as e:
            logger.error(f'Failed to import config: {e}')
            raise
