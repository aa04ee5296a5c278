"""Data models for the serial monitoring subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Severity(Enum):
    """Severity assigned to a log line at classification time."""

    INFO = 'INFO'
    WARNING = 'WARNING'
    ERROR = 'ERROR'


class LaneKind(Enum):
    """The two independent buffer lanes."""

    MAIN = 'main'
    ALERT = 'alert'


class ScrollMode(Enum):
    """Viewport states for a single lane."""

    AUTO_FOLLOW = 'AUTO_FOLLOW'
    MANUAL = 'MANUAL'


class NavigationCommand(Enum):
    """Discrete user navigation commands."""

    SCROLL_MAIN_UP = 'scroll_main_up'
    SCROLL_MAIN_DOWN = 'scroll_main_down'
    RESUME_MAIN_FOLLOW = 'resume_main_follow'
    SCROLL_ALERT_UP = 'scroll_alert_up'
    SCROLL_ALERT_DOWN = 'scroll_alert_down'
    RESUME_ALERT_FOLLOW = 'resume_alert_follow'
    QUIT = 'quit'


SEVERITY_COLORS = {
    Severity.INFO: '#4caf50',
    Severity.WARNING: '#ffeb3b',
    Severity.ERROR: '#f44336',
}


@dataclass(frozen=True)
class LogEntry:
    """A classified line as stored in a buffer lane."""

    text: str
    severity: Severity

    @property
    def color(self) -> str:
        """Display colour derived from the severity."""
        return SEVERITY_COLORS[self.severity]

    @property
    def lane(self) -> LaneKind:
        if self.severity is Severity.INFO:
            return LaneKind.MAIN
        return LaneKind.ALERT


@dataclass(frozen=True)
class PaneView:
    """What a presentation collaborator needs to draw one lane."""

    lane: LaneKind
    entries: Tuple[LogEntry, ...]
    offset: int
    mode: ScrollMode
    visible_height: int

    @property
    def visible_entries(self) -> Tuple[LogEntry, ...]:
        if self.visible_height <= 0:
            return ()
        return self.entries[self.offset:self.offset + self.visible_height]

    @property
    def is_following(self) -> bool:
        return self.mode is ScrollMode.AUTO_FOLLOW


@dataclass(frozen=True)
class RenderFrame:
    """Snapshot of both panes produced once per render tick."""

    main: PaneView
    alert: PaneView
    received: int
    stream_ended: bool
    failure: Optional[str] = None

    def pane(self, lane: LaneKind) -> PaneView:
        return self.main if lane is LaneKind.MAIN else self.alert
