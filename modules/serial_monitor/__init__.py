"""Serial log monitoring subsystem."""

from .buffer import BufferLane, DualBuffer
from .classifier import classify, to_entry
from .errors import (
    PortNotFoundError,
    SerialMonitorError,
    TransportClosed,
    TransportError,
    TransportTimeout,
)
from .framer import LineFramer
from .models import (
    LaneKind,
    LogEntry,
    NavigationCommand,
    PaneView,
    RenderFrame,
    ScrollMode,
    Severity,
)
from .pipeline import IngestionPipeline
from .session import MonitorSession
from .transport import (
    ProcessTransport,
    SerialTransport,
    StreamTransport,
    Transport,
    available_ports,
    find_default_port,
)
from .viewport import LaneViewport, ViewportController, ViewportUpdate, pane_heights

__all__ = [
    'BufferLane',
    'DualBuffer',
    'IngestionPipeline',
    'LaneKind',
    'LaneViewport',
    'LineFramer',
    'LogEntry',
    'MonitorSession',
    'NavigationCommand',
    'PaneView',
    'PortNotFoundError',
    'ProcessTransport',
    'RenderFrame',
    'ScrollMode',
    'SerialMonitorError',
    'SerialTransport',
    'Severity',
    'StreamTransport',
    'Transport',
    'TransportClosed',
    'TransportError',
    'TransportTimeout',
    'ViewportController',
    'ViewportUpdate',
    'available_ports',
    'classify',
    'find_default_port',
    'pane_heights',
    'to_entry',
]
