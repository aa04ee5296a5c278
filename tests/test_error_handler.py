import os
import sys
import unittest
from unittest.mock import Mock, patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.serial_monitor.errors import PortNotFoundError, TransportClosed, TransportError
from ui.error_handler import (
    ERROR_TEMPLATES,
    ErrorCode,
    ErrorHandler,
    ErrorLevel,
    map_exception_to_error_code,
)


class ErrorMappingTests(unittest.TestCase):
    def test_transport_exceptions_map_to_stream_codes(self):
        self.assertEqual(map_exception_to_error_code(TransportClosed('eof')), ErrorCode.STREAM_ENDED)
        self.assertEqual(map_exception_to_error_code(TransportError('io')), ErrorCode.STREAM_READ_FAILED)
        self.assertEqual(map_exception_to_error_code(PortNotFoundError('none')), ErrorCode.PORT_NOT_FOUND)

    def test_unknown_exception(self):
        self.assertEqual(map_exception_to_error_code(RuntimeError('x')), ErrorCode.UNKNOWN_ERROR)


class ErrorHandlerTests(unittest.TestCase):
    def setUp(self):
        self.handler = ErrorHandler()

    def test_handle_error_emits_and_counts(self):
        received = []
        self.handler.error_occurred.connect(received.append)

        info = self.handler.handle_error(ErrorCode.PORT_NOT_FOUND, details='no ports')

        self.assertEqual(self.handler.error_count, 1)
        self.assertEqual(received, [info])
        self.assertEqual(info.level, ErrorLevel.ERROR)
        self.assertEqual(info.details, 'no ports')

    def test_templates_are_not_mutated(self):
        self.handler.handle_error(ErrorCode.STREAM_READ_FAILED, details='first')
        self.assertIsNone(ERROR_TEMPLATES[ErrorCode.STREAM_READ_FAILED].details)

    def test_exception_adds_technical_info(self):
        try:
            raise TransportError('read failed')
        except TransportError as exc:
            info = self.handler.handle_error(ErrorCode.PORT_OPEN_FAILED, exception=exc)
        self.assertIn('TransportError: read failed', info.technical_info)

    def test_registered_handler_is_called(self):
        callback = Mock()
        self.handler.register_error_handler(ErrorCode.STREAM_ENDED, callback)

        self.handler.handle_error(ErrorCode.STREAM_ENDED, context={'source': 'stdin'})

        callback.assert_called_once()
        self.assertEqual(callback.call_args[0][1], {'source': 'stdin'})

    def test_no_dialog_without_parent(self):
        with patch('ui.error_handler.QMessageBox') as message_box:
            self.handler.handle_error(ErrorCode.PORT_NOT_FOUND)
        message_box.assert_not_called()

    def test_dialog_shown_for_errors_once_parented(self):
        parent = Mock()
        self.handler.set_parent_widget(parent)
        with patch('ui.error_handler.QMessageBox') as message_box:
            self.handler.handle_error(ErrorCode.PORT_OPEN_FAILED, details='busy')
            self.handler.handle_error(ErrorCode.STREAM_READ_FAILED)

        message_box.assert_called_once_with(parent)
        message_box.return_value.exec.assert_called_once()

    def test_handle_exception_maps_code(self):
        info = self.handler.handle_exception(TransportClosed('eof'))
        self.assertEqual(info.code, ErrorCode.STREAM_ENDED)
        self.assertEqual(info.level, ErrorLevel.INFO)


if __name__ == '__main__':
    unittest.main()
