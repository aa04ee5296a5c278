"""Byte transports feeding the ingestion pipeline.

Every transport exposes ``read(size) -> bytes`` and ``close()``. ``read``
raises :class:`TransportTimeout` when no data arrived in time and
:class:`TransportError` (or a subclass) when the stream is unusable.
"""

from __future__ import annotations

import os
import selectors
import shlex
import subprocess
import sys
from typing import BinaryIO, List, Optional, Sequence, Union

import serial
from serial.tools import list_ports

from utils import common

from .errors import PortNotFoundError, TransportClosed, TransportError, TransportTimeout

logger = common.get_logger('serial_transport')

DEFAULT_BAUD_RATE = 115200
DEFAULT_READ_TIMEOUT_MS = 1000
DEFAULT_READ_SIZE = 1024
DEFAULT_STREAM_POLL_MS = 200


class Transport:
    """Interface implemented by all byte sources."""

    description = 'transport'

    def read(self, size: int = DEFAULT_READ_SIZE) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


def available_ports() -> List[str]:
    """Return device names of the serial ports currently present."""
    return [port.device for port in list_ports.comports()]


def find_default_port() -> str:
    """Return the first available serial port or raise :class:`PortNotFoundError`."""
    ports = available_ports()
    if not ports:
        raise PortNotFoundError('No available serial ports.')
    logger.info('Discovered serial ports: %s', ', '.join(ports))
    return ports[0]


class SerialTransport(Transport):
    """Reads from a serial port through pyserial."""

    def __init__(
        self,
        port: str,
        baud_rate: int = DEFAULT_BAUD_RATE,
        timeout_ms: int = DEFAULT_READ_TIMEOUT_MS,
        serial_factory=serial.Serial,
    ) -> None:
        self.port_name = port
        self.baud_rate = baud_rate
        self.description = f'{port} @ {baud_rate} baud'
        try:
            self._port = serial_factory(port=port, baudrate=baud_rate, timeout=timeout_ms / 1000.0)
        except (serial.SerialException, OSError, ValueError) as exc:
            raise TransportError(f'Failed to open {port}: {exc}') from exc
        logger.info('Connected to %s at %s baud', port, baud_rate)

    def read(self, size: int = DEFAULT_READ_SIZE) -> bytes:
        try:
            waiting = self._port.in_waiting
            # Block for a single byte when idle so the port timeout applies.
            data = self._port.read(min(size, waiting) if waiting else 1)
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f'Serial read failed on {self.port_name}: {exc}') from exc
        if not data:
            raise TransportTimeout(f'No data from {self.port_name}')
        return data

    def close(self) -> None:
        try:
            self._port.close()
        except (serial.SerialException, OSError) as exc:
            logger.warning('Error closing %s: %s', self.port_name, exc)


class StreamTransport(Transport):
    """Reads from an already open binary stream such as stdin or a replay file.

    Streams backed by a file descriptor are polled with a timeout and read
    straight from the descriptor, so an idle pipe yields
    :class:`TransportTimeout` instead of blocking the producer indefinitely.
    Regular files, in-memory buffers and all streams on Windows, where only
    sockets can be polled, use a plain ``read1``.
    """

    def __init__(
        self,
        stream: BinaryIO,
        description: str = 'stream',
        poll_timeout_ms: int = DEFAULT_STREAM_POLL_MS,
    ) -> None:
        self._stream = stream
        self.description = description
        self._poll_timeout = poll_timeout_ms / 1000.0
        self._selector: Optional[selectors.BaseSelector] = None
        self._fd = self._pollable_fd(stream)
        if self._fd is not None:
            self._selector = self._open_selector(self._fd)

    @staticmethod
    def _pollable_fd(stream: BinaryIO) -> Optional[int]:
        if sys.platform == 'win32':
            return None
        try:
            return stream.fileno()
        except (OSError, ValueError):
            return None

    @staticmethod
    def _open_selector(fd: int) -> Optional[selectors.BaseSelector]:
        selector = selectors.DefaultSelector()
        try:
            selector.register(fd, selectors.EVENT_READ)
        except (OSError, ValueError):
            # epoll rejects regular files; those never block on read anyway.
            selector.close()
            return None
        return selector

    def read(self, size: int = DEFAULT_READ_SIZE) -> bytes:
        try:
            if self._selector is not None:
                if not self._selector.select(self._poll_timeout):
                    raise TransportTimeout(f'No data from {self.description}')
                data = os.read(self._fd, size)
            else:
                reader = getattr(self._stream, 'read1', None) or self._stream.read
                data = reader(size)
        except (OSError, ValueError) as exc:
            raise TransportError(f'Read failed on {self.description}: {exc}') from exc
        if not data:
            raise TransportClosed(f'{self.description} reached end of stream')
        return data

    def close(self) -> None:
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        try:
            self._stream.close()
        except OSError as exc:
            logger.warning('Error closing %s: %s', self.description, exc)


class ProcessTransport(StreamTransport):
    """Streams the stdout of a child process, e.g. ``adb logcat``."""

    def __init__(self, command: Union[str, Sequence[str]]) -> None:
        command_list = shlex.split(command) if isinstance(command, str) else list(command)
        try:
            self._process: Optional[subprocess.Popen] = subprocess.Popen(
                command_list,
                shell=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise TransportError(f'Failed to start {command_list!r}: {exc}') from exc
        logger.info('Started process transport', extra={'command': command_list})
        super().__init__(self._process.stdout, description=' '.join(command_list))

    def close(self) -> None:
        process = self._process
        if process is None:
            return
        self._process = None
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=2.0)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        super().close()
