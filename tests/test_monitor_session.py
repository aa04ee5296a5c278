import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.serial_monitor.classifier import to_entry
from modules.serial_monitor.errors import TransportClosed, TransportError
from modules.serial_monitor.models import LaneKind, NavigationCommand, ScrollMode, Severity
from modules.serial_monitor.pipeline import IngestionPipeline
from modules.serial_monitor.session import MonitorSession
from modules.serial_monitor.transport import Transport


class ScriptedTransport(Transport):
    """Returns scripted chunks in order, then reports end of stream."""

    description = 'scripted'

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def read(self, size=1024):
        if not self._chunks:
            raise TransportClosed('script exhausted')
        return self._chunks.pop(0)

    def close(self):
        self.closed = True


class StubPipeline:
    """Pipeline stand-in whose queued lines are fed directly by the test."""

    def __init__(self):
        self.pending = []
        self.finished = False
        self.failure = None
        self.received = 0
        self.started = False
        self.stopped = False

    def push(self, *lines):
        self.pending.extend(to_entry(line) for line in lines)

    def drain(self, limit=None):
        count = len(self.pending) if limit is None else min(limit, len(self.pending))
        taken, self.pending = self.pending[:count], self.pending[count:]
        self.received += len(taken)
        return taken

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


class MonitorSessionTests(unittest.TestCase):
    def setUp(self):
        self.pipeline = StubPipeline()
        self.session = MonitorSession(self.pipeline, capacity=50, main_percent=80)

    def test_empty_buffers_render_empty_panes(self):
        frame = self.session.tick(total_rows=10)
        self.assertEqual(frame.main.entries, ())
        self.assertEqual(frame.alert.visible_entries, ())
        self.assertEqual(frame.main.offset, 0)
        self.assertFalse(frame.stream_ended)

    def test_tick_routes_and_follows(self):
        self.pipeline.push(*[f'line {idx}' for idx in range(20)])
        self.pipeline.push('WRN: temp high', 'ERR: sensor lost')

        frame = self.session.tick(total_rows=10)

        self.assertEqual(len(frame.main.entries), 20)
        self.assertEqual(frame.main.visible_height, 8)
        self.assertEqual(frame.main.offset, 12)
        self.assertEqual([e.text for e in frame.main.visible_entries][-1], 'line 19')
        self.assertEqual([e.severity for e in frame.alert.entries], [Severity.WARNING, Severity.ERROR])
        self.assertEqual(frame.alert.visible_height, 2)
        self.assertEqual(frame.received, 22)

    def test_auto_follow_holds_after_every_append(self):
        for idx in range(30):
            self.pipeline.push(f'line {idx}')
            frame = self.session.tick(total_rows=10)
            self.assertEqual(frame.main.offset, max(0, len(frame.main.entries) - 8))

    def test_manual_scroll_freezes_view_while_lines_arrive(self):
        self.pipeline.push(*[str(idx) for idx in range(20)])
        self.session.tick(total_rows=10)

        self.assertTrue(self.session.handle_command(NavigationCommand.SCROLL_MAIN_UP))
        self.pipeline.push(*[str(idx) for idx in range(20, 40)])
        frame = self.session.tick(total_rows=10)

        self.assertEqual(frame.main.mode, ScrollMode.MANUAL)
        self.assertEqual(frame.main.offset, 11)

        self.session.handle_command(NavigationCommand.RESUME_MAIN_FOLLOW)
        frame = self.session.tick(total_rows=10)
        self.assertEqual(frame.main.offset, 32)
        self.assertTrue(frame.main.is_following)

    def test_alert_commands_do_not_affect_main_lane(self):
        self.pipeline.push(*[f'info {idx}' for idx in range(20)])
        self.pipeline.push(*[f'ERR {idx}' for idx in range(10)])
        before = self.session.tick(total_rows=10)

        self.session.handle_command(NavigationCommand.SCROLL_ALERT_UP)
        self.session.handle_command(NavigationCommand.SCROLL_ALERT_UP)
        after = self.session.tick(total_rows=10)

        self.assertEqual(after.main.offset, before.main.offset)
        self.assertEqual(after.main.mode, ScrollMode.AUTO_FOLLOW)
        self.assertEqual(after.alert.offset, before.alert.offset - 2)

    def test_quit_returns_false(self):
        self.assertFalse(self.session.handle_command(NavigationCommand.QUIT))

    def test_max_lines_per_tick_limits_drain(self):
        session = MonitorSession(self.pipeline, capacity=50, max_lines_per_tick=3)
        self.pipeline.push(*[str(idx) for idx in range(7)])
        self.assertEqual(len(session.tick(10).main.entries), 3)
        self.assertEqual(len(session.tick(10).main.entries), 6)
        self.assertEqual(len(session.tick(10).main.entries), 7)

    def test_finished_pipeline_keeps_buffers(self):
        self.pipeline.push('ok', 'ERR bad')
        self.session.tick(10)
        self.pipeline.finished = True
        self.pipeline.failure = TransportError('unplugged')

        frame = self.session.tick(10)

        self.assertTrue(frame.stream_ended)
        self.assertEqual(frame.failure, 'unplugged')
        self.assertEqual(len(frame.main.entries), 1)
        self.assertEqual(len(frame.alert.entries), 1)
        self.assertEqual(self.session.status, 'Stream ended: unplugged')

    def test_start_and_close_delegate_to_pipeline(self):
        self.session.start()
        self.session.close()
        self.assertTrue(self.pipeline.started)
        self.assertTrue(self.pipeline.stopped)

    def test_frame_pane_lookup(self):
        frame = self.session.tick(10)
        self.assertIs(frame.pane(LaneKind.MAIN), frame.main)
        self.assertIs(frame.pane(LaneKind.ALERT), frame.alert)


class EndToEndTests(unittest.TestCase):
    def test_chunks_become_routed_lines(self):
        transport = ScriptedTransport([b'hello ', b'world\r\n', b'ERR: oops\n'])
        session = MonitorSession(IngestionPipeline(transport))
        session.start()
        session.pipeline._thread.join(timeout=2.0)

        frame = session.tick(total_rows=20)

        self.assertEqual([e.text for e in frame.main.entries], ['hello world'])
        self.assertEqual(frame.main.entries[0].severity, Severity.INFO)
        self.assertEqual([e.text for e in frame.alert.entries], ['ERR: oops'])
        self.assertEqual(frame.alert.entries[0].severity, Severity.ERROR)
        self.assertTrue(frame.stream_ended)
        self.assertIsInstance(session.pipeline.failure, TransportClosed)

        session.close()
        self.assertTrue(transport.closed)


if __name__ == '__main__':
    unittest.main()
