import logging
import os
import sys
import time
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.serial_monitor.errors import TransportClosed
from modules.serial_monitor.pipeline import IngestionPipeline
from modules.serial_monitor.transport import Transport
from utils import common


class _RecordCollector(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class _OneShotTransport(Transport):
    description = 'one-shot'

    def __init__(self):
        self._done = False

    def read(self, size=1024):
        if self._done:
            raise TransportClosed('done')
        self._done = True
        return b'line\n'

    def close(self):
        pass


class TraceIdLoggingTests(unittest.TestCase):
    def test_trace_id_scope_sets_and_restores(self):
        self.assertEqual(common.get_trace_id(), '-')
        with common.trace_id_scope('trace-xyz'):
            self.assertEqual(common.get_trace_id(), 'trace-xyz')
        self.assertEqual(common.get_trace_id(), '-')

    def test_generated_trace_ids_are_unique(self):
        self.assertNotEqual(common.generate_trace_id(), common.generate_trace_id())

    def test_logger_records_carry_trace_id(self):
        logger = common.get_logger('trace_logging_test')
        collector = _RecordCollector()
        logger.addHandler(collector)
        try:
            with common.trace_id_scope('abc123'):
                logger.info('inside scope')
        finally:
            logger.removeHandler(collector)

        self.assertEqual(collector.records[-1].trace_id, 'abc123')

    def test_producer_thread_logs_under_pipeline_trace_id(self):
        logger = common.get_logger('serial_pipeline')
        collector = _RecordCollector()
        logger.addHandler(collector)
        try:
            pipeline = IngestionPipeline(_OneShotTransport())
            pipeline.start()
            deadline = time.monotonic() + 2.0
            while not pipeline.finished and time.monotonic() < deadline:
                pipeline.drain()
                time.sleep(0.005)
        finally:
            logger.removeHandler(collector)

        producer_records = [r for r in collector.records if r.threadName.startswith('serial-producer')]
        self.assertTrue(producer_records)
        self.assertTrue(all(r.trace_id not in ('-', None) for r in producer_records))

    def test_set_log_level_applies_to_project_loggers(self):
        common.set_log_level('DEBUG', names=['serial_buffer'])
        try:
            self.assertEqual(logging.getLogger('serial_buffer').level, logging.DEBUG)
        finally:
            common.set_log_level('INFO', names=['serial_buffer'])

    def test_set_log_level_rejects_unknown_level(self):
        with self.assertRaises(ValueError):
            common.set_log_level('LOUD')


if __name__ == '__main__':
    unittest.main()
