import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.serial_monitor.buffer import BufferLane, DualBuffer
from modules.serial_monitor.models import LaneKind, LogEntry, Severity


def _info(text):
    return LogEntry(text=text, severity=Severity.INFO)


class BufferLaneTests(unittest.TestCase):
    def test_append_preserves_arrival_order(self):
        lane = BufferLane(capacity=5)
        for idx in range(3):
            lane.append(_info(f'line {idx}'))
        self.assertEqual([e.text for e in lane.snapshot()], ['line 0', 'line 1', 'line 2'])

    def test_eviction_keeps_last_entries_and_never_exceeds_cap(self):
        lane = BufferLane(capacity=4)
        for idx in range(11):
            lane.append(_info(f'line {idx}'))
            self.assertLessEqual(len(lane), 4)
        self.assertEqual([e.text for e in lane.snapshot()], ['line 7', 'line 8', 'line 9', 'line 10'])
        self.assertEqual(lane.evicted_count, 7)

    def test_extend_drains_overflow_in_one_step(self):
        lane = BufferLane(capacity=3)
        lane.extend(_info(str(idx)) for idx in range(10))
        self.assertEqual([e.text for e in lane.snapshot()], ['7', '8', '9'])
        self.assertEqual(lane.evicted_count, 7)

    def test_snapshot_is_immutable_copy(self):
        lane = BufferLane(capacity=3)
        lane.append(_info('a'))
        snapshot = lane.snapshot()
        lane.append(_info('b'))
        self.assertIsInstance(snapshot, tuple)
        self.assertEqual(len(snapshot), 1)

    def test_empty_lane(self):
        lane = BufferLane()
        self.assertEqual(len(lane), 0)
        self.assertEqual(lane.snapshot(), ())
        self.assertEqual(lane.capacity, 1000)

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            BufferLane(capacity=0)


class DualBufferTests(unittest.TestCase):
    def test_routes_by_severity(self):
        buffer = DualBuffer(capacity=10)
        self.assertEqual(buffer.append(LogEntry('boot', Severity.INFO)), LaneKind.MAIN)
        self.assertEqual(buffer.append(LogEntry('WRN low', Severity.WARNING)), LaneKind.ALERT)
        self.assertEqual(buffer.append(LogEntry('ERR bad', Severity.ERROR)), LaneKind.ALERT)

        self.assertEqual([e.text for e in buffer.main.snapshot()], ['boot'])
        alert = buffer.alert.snapshot()
        self.assertEqual([e.severity for e in alert], [Severity.WARNING, Severity.ERROR])
        self.assertEqual(buffer.lengths(), (1, 2))

    def test_lanes_evict_independently(self):
        buffer = DualBuffer(capacity=2)
        buffer.append(LogEntry('ERR keep', Severity.ERROR))
        for idx in range(5):
            buffer.append(_info(str(idx)))
        self.assertEqual(buffer.lengths(), (2, 1))
        self.assertEqual(buffer.lane(LaneKind.ALERT).snapshot()[0].text, 'ERR keep')


if __name__ == '__main__':
    unittest.main()
