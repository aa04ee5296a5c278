"""Scroll state machines for the main and alert panes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .models import LaneKind, NavigationCommand, ScrollMode

DEFAULT_MAIN_PANE_PERCENT = 80


@dataclass(frozen=True)
class ViewportUpdate:
    """Return payload for viewport transitions."""

    offset: int
    mode: ScrollMode
    changed: bool


def pane_heights(total_rows: int, main_percent: int = DEFAULT_MAIN_PANE_PERCENT) -> Tuple[int, int]:
    """Split ``total_rows`` into (main, alert) visible heights by percentage."""
    total_rows = max(0, int(total_rows))
    main_percent = min(100, max(0, int(main_percent)))
    main_rows = total_rows * main_percent // 100
    alert_rows = total_rows * (100 - main_percent) // 100
    return main_rows, alert_rows


class LaneViewport:
    """Two-state scroll machine: AUTO_FOLLOW tracks the tail, MANUAL stays put.

    Scrolling that actually moves the offset switches to MANUAL;
    :meth:`resume_follow` switches back. In AUTO_FOLLOW every :meth:`sync`
    places the offset at ``max(0, length - visible_height)``.
    """

    def __init__(self, lane: LaneKind) -> None:
        self.lane = lane
        self._offset = 0
        self._mode = ScrollMode.AUTO_FOLLOW

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def mode(self) -> ScrollMode:
        return self._mode

    @property
    def is_manual(self) -> bool:
        return self._mode is ScrollMode.MANUAL

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def scroll_up(self) -> ViewportUpdate:
        if self._offset > 0:
            self._offset -= 1
            self._mode = ScrollMode.MANUAL
            return self._update(True)
        return self._update(False)

    def scroll_down(self, length: int) -> ViewportUpdate:
        if self._offset < max(0, length - 1):
            self._offset += 1
            self._mode = ScrollMode.MANUAL
            return self._update(True)
        return self._update(False)

    def resume_follow(self) -> ViewportUpdate:
        changed = self._mode is not ScrollMode.AUTO_FOLLOW
        self._mode = ScrollMode.AUTO_FOLLOW
        return self._update(changed)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def sync(self, length: int, visible_height: int) -> ViewportUpdate:
        """Recompute the offset for the current lane length and pane height."""
        previous = self._offset
        if self._mode is ScrollMode.AUTO_FOLLOW:
            self._offset = max(0, length - max(0, visible_height))
        else:
            self._offset = min(self._offset, max(0, length - 1))
        return self._update(self._offset != previous)

    def _update(self, changed: bool) -> ViewportUpdate:
        return ViewportUpdate(offset=self._offset, mode=self._mode, changed=changed)


class ViewportController:
    """Owns one :class:`LaneViewport` per lane and dispatches commands to them."""

    _COMMAND_TARGETS: Dict[NavigationCommand, Tuple[LaneKind, str]] = {
        NavigationCommand.SCROLL_MAIN_UP: (LaneKind.MAIN, 'up'),
        NavigationCommand.SCROLL_MAIN_DOWN: (LaneKind.MAIN, 'down'),
        NavigationCommand.RESUME_MAIN_FOLLOW: (LaneKind.MAIN, 'resume'),
        NavigationCommand.SCROLL_ALERT_UP: (LaneKind.ALERT, 'up'),
        NavigationCommand.SCROLL_ALERT_DOWN: (LaneKind.ALERT, 'down'),
        NavigationCommand.RESUME_ALERT_FOLLOW: (LaneKind.ALERT, 'resume'),
    }

    def __init__(self, main_percent: int = DEFAULT_MAIN_PANE_PERCENT) -> None:
        self.main_percent = main_percent
        self.main = LaneViewport(LaneKind.MAIN)
        self.alert = LaneViewport(LaneKind.ALERT)

    def viewport(self, lane: LaneKind) -> LaneViewport:
        return self.main if lane is LaneKind.MAIN else self.alert

    def apply(self, command: NavigationCommand, lengths: Tuple[int, int]) -> ViewportUpdate:
        """Apply a navigation command to the single lane it targets."""
        target = self._COMMAND_TARGETS.get(command)
        if target is None:
            raise ValueError(f'{command} is not a viewport command')
        lane, action = target
        viewport = self.viewport(lane)
        if action == 'up':
            return viewport.scroll_up()
        if action == 'down':
            length = lengths[0] if lane is LaneKind.MAIN else lengths[1]
            return viewport.scroll_down(length)
        return viewport.resume_follow()

    def sync(self, lengths: Tuple[int, int], total_rows: int) -> Tuple[int, int]:
        """Sync both lanes and return their visible heights."""
        main_rows, alert_rows = pane_heights(total_rows, self.main_percent)
        self.main.sync(lengths[0], main_rows)
        self.alert.sync(lengths[1], alert_rows)
        return main_rows, alert_rows
