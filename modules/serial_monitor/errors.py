"""Exception hierarchy for the serial monitoring pipeline."""

from __future__ import annotations


class SerialMonitorError(Exception):
    """Base class for serial monitor failures."""


class TransportError(SerialMonitorError):
    """A transport read failed; the producer cannot continue."""


class TransportTimeout(TransportError):
    """No data arrived within the read timeout. Not fatal."""


class TransportClosed(TransportError):
    """The underlying stream reached end of file or was closed."""


class PortNotFoundError(SerialMonitorError):
    """No serial port was configured and none could be discovered."""
