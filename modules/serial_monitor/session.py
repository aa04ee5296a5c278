"""Consumer-side state for one monitoring session."""

from __future__ import annotations

from typing import Optional

from utils import common

from .buffer import DEFAULT_LANE_CAPACITY, DualBuffer
from .models import LaneKind, NavigationCommand, PaneView, RenderFrame
from .pipeline import IngestionPipeline
from .viewport import DEFAULT_MAIN_PANE_PERCENT, ViewportController

logger = common.get_logger('serial_session')


class MonitorSession:
    """Owns the dual buffer and viewports; driven once per render tick.

    Only the thread calling :meth:`tick` and :meth:`handle_command` touches
    the buffers, so no locking is needed around them.
    """

    def __init__(
        self,
        pipeline: IngestionPipeline,
        capacity: int = DEFAULT_LANE_CAPACITY,
        main_percent: int = DEFAULT_MAIN_PANE_PERCENT,
        max_lines_per_tick: int = 0,
    ) -> None:
        self.pipeline = pipeline
        self.buffer = DualBuffer(capacity)
        self.viewports = ViewportController(main_percent)
        self._max_lines_per_tick = max_lines_per_tick if max_lines_per_tick > 0 else None
        self._ended_logged = False

    def start(self) -> None:
        self.pipeline.start()

    def close(self) -> None:
        self.pipeline.stop()

    def tick(self, total_rows: int) -> RenderFrame:
        """Drain new entries, recompute both viewports and describe the panes."""
        for entry in self.pipeline.drain(self._max_lines_per_tick):
            self.buffer.append(entry)

        if self.pipeline.finished and not self._ended_logged:
            self._ended_logged = True
            logger.info('Input exhausted; continuing on %s buffered entries', sum(self.buffer.lengths()))

        main_rows, alert_rows = self.viewports.sync(self.buffer.lengths(), total_rows)
        failure = self.pipeline.failure
        return RenderFrame(
            main=self._pane(LaneKind.MAIN, main_rows),
            alert=self._pane(LaneKind.ALERT, alert_rows),
            received=self.pipeline.received,
            stream_ended=self.pipeline.finished,
            failure=str(failure) if failure is not None else None,
        )

    def handle_command(self, command: NavigationCommand) -> bool:
        """Apply ``command``; return False when the session should quit."""
        if command is NavigationCommand.QUIT:
            logger.info('Quit requested')
            return False
        self.viewports.apply(command, self.buffer.lengths())
        return True

    def _pane(self, lane: LaneKind, visible_height: int) -> PaneView:
        viewport = self.viewports.viewport(lane)
        return PaneView(
            lane=lane,
            entries=self.buffer.lane(lane).snapshot(),
            offset=viewport.offset,
            mode=viewport.mode,
            visible_height=visible_height,
        )

    @property
    def status(self) -> Optional[str]:
        if not self.pipeline.finished:
            return None
        failure = self.pipeline.failure
        return f'Stream ended: {failure}' if failure is not None else 'Stream ended'
