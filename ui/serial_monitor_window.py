"""Qt window presenting the main log pane and the errors/warnings pane."""

from __future__ import annotations

import functools
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QCloseEvent, QColor, QFont, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QGroupBox,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QVBoxLayout,
    QWidget,
)

from config.constants import KeyBindings, PanelText, UIConstants
from modules.serial_monitor import (
    LaneKind,
    LogEntry,
    MonitorSession,
    NavigationCommand,
    PaneView,
    RenderFrame,
)
from modules.serial_monitor.errors import TransportClosed
from ui.error_handler import ErrorCode, ErrorHandler
from utils import common


logger = common.get_logger('serial_monitor_window')


class SerialMonitorWindow(QMainWindow):
    """Two stacked panes fed by a :class:`MonitorSession` on a fixed timer."""

    def __init__(
        self,
        session: MonitorSession,
        poll_interval_ms: int = UIConstants.POLL_INTERVAL_MS,
        font_size: int = UIConstants.FONT_SIZE,
        source_description: str = '',
        error_handler: Optional[ErrorHandler] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self.source_description = source_description
        self.error_handler = error_handler or ErrorHandler()
        self.error_handler.set_parent_widget(self)
        self._last_rendered: Dict[LaneKind, Tuple] = {}
        self._end_reported = False
        self._closed = False
        self.last_frame: Optional[RenderFrame] = None

        self.setWindowTitle(f'{PanelText.TITLE_MAIN} · {source_description}' if source_description else PanelText.TITLE_MAIN)
        self.resize(UIConstants.WINDOW_WIDTH, UIConstants.WINDOW_HEIGHT)
        self.setMinimumSize(UIConstants.WINDOW_MIN_WIDTH, UIConstants.WINDOW_MIN_HEIGHT)

        font = QFont(UIConstants.FONT_FAMILY, font_size)
        font.setStyleHint(QFont.StyleHint.Monospace)

        self.main_box, self.main_list = self._create_pane(PanelText.TITLE_MAIN, font)
        self.alert_box, self.alert_list = self._create_pane(PanelText.TITLE_ALERT, font)
        self.status_label = QLabel(PanelText.HELP_KEYS)

        self._build_layout()
        self._register_shortcuts()

        self.update_timer = QTimer(self)
        self.update_timer.setInterval(poll_interval_ms)
        self.update_timer.timeout.connect(self.refresh)

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------
    def _create_pane(self, title: str, font: QFont) -> Tuple[QGroupBox, QListWidget]:
        box = QGroupBox(title)
        layout = QVBoxLayout(box)
        layout.setContentsMargins(4, 4, 4, 4)

        view = QListWidget()
        view.setFont(font)
        view.setUniformItemSizes(True)
        view.setSpacing(0)
        view.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        view.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        # The session decides the visible window; the widget never scrolls itself.
        view.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        view.setStyleSheet(f'background: {UIConstants.PANE_BACKGROUND};')
        layout.addWidget(view)
        return box, view

    def _build_layout(self) -> None:
        main_percent = self.session.viewports.main_percent
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.addWidget(self.main_box, main_percent)
        layout.addWidget(self.alert_box, 100 - main_percent)
        layout.addWidget(self.status_label)
        self.setCentralWidget(central)

    def _register_shortcuts(self) -> None:
        self._shortcuts = []
        for command in NavigationCommand:
            key = getattr(KeyBindings, command.name)
            shortcut = QShortcut(QKeySequence(key), self)
            shortcut.setContext(Qt.ShortcutContext.WindowShortcut)
            shortcut.activated.connect(functools.partial(self.dispatch, command))
            self._shortcuts.append(shortcut)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the producer and the render timer."""
        self.session.start()
        self.update_timer.start()
        self._set_status(PanelText.STATUS_CONNECTED.format(source=self.source_description or 'device'))
        logger.info('Monitor window started for %s', self.source_description)

    def dispatch(self, command: NavigationCommand) -> None:
        """Apply a navigation command and redraw immediately."""
        if not self.session.handle_command(command):
            self.close()
            return
        self.refresh()

    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        if not self._closed:
            self._closed = True
            self.update_timer.stop()
            self.session.close()
            self.error_handler.set_parent_widget(None)
        event.accept()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def available_rows(self) -> int:
        """Rows both panes can show together, measured from the list viewports."""
        row_height = max(1, self.main_list.fontMetrics().lineSpacing())
        height = self.main_list.viewport().height() + self.alert_list.viewport().height()
        return max(0, height // row_height)

    def refresh(self) -> None:
        frame = self.session.tick(self.available_rows())
        self.last_frame = frame
        self._render_pane(frame.main, self.main_box, self.main_list, PanelText.TITLE_MAIN)
        self._render_pane(frame.alert, self.alert_box, self.alert_list, PanelText.TITLE_ALERT)
        if frame.stream_ended:
            self._report_stream_end(frame)

    def _render_pane(self, pane: PaneView, box: QGroupBox, view: QListWidget, title: str) -> None:
        visible = pane.visible_entries
        key = (pane.offset, pane.mode, len(pane.entries), visible)
        if self._last_rendered.get(pane.lane) == key:
            return
        self._last_rendered[pane.lane] = key

        mode = PanelText.STATUS_FOLLOWING if pane.is_following else PanelText.STATUS_MANUAL
        box.setTitle(f'{title} ({mode}, {len(pane.entries)} lines)')

        view.setUpdatesEnabled(False)
        try:
            view.clear()
            for entry in visible:
                view.addItem(self._make_item(entry, pane.lane))
        finally:
            view.setUpdatesEnabled(True)

    @staticmethod
    def _make_item(entry: LogEntry, lane: LaneKind) -> QListWidgetItem:
        item = QListWidgetItem(entry.text)
        color = entry.color if lane is LaneKind.ALERT else UIConstants.MAIN_TEXT_COLOR
        item.setForeground(QColor(color))
        return item

    def _report_stream_end(self, frame: RenderFrame) -> None:
        if frame.failure:
            self._set_status(PanelText.STATUS_STREAM_FAILED.format(reason=frame.failure))
        else:
            self._set_status(PanelText.STATUS_STREAM_ENDED)
        if self._end_reported:
            return
        self._end_reported = True
        failure = self.session.pipeline.failure
        if failure is None or isinstance(failure, TransportClosed):
            self.error_handler.handle_error(ErrorCode.STREAM_ENDED, details=frame.failure)
        else:
            self.error_handler.handle_error(ErrorCode.STREAM_READ_FAILED, details=frame.failure)

    def _set_status(self, text: str) -> None:
        self.status_label.setText(f'{text}  |  {PanelText.HELP_KEYS}')
