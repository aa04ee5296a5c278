"""Producer thread turning transport bytes into classified entries."""

from __future__ import annotations

import queue
import threading
from typing import List, Optional

from utils import common

from .classifier import to_entry
from .errors import TransportClosed, TransportTimeout
from .framer import LineFramer
from .models import LogEntry
from .transport import DEFAULT_READ_SIZE, Transport

logger = common.get_logger('serial_pipeline')

_END_OF_STREAM = object()


class IngestionPipeline:
    """Runs read -> frame -> classify on a dedicated thread.

    Entries are handed to the consumer through a single queue; the producer
    keeps no reference to an entry once it is queued. Read timeouts are
    retried. Any other transport failure ends the producer, is kept in
    :attr:`failure`, and is followed by an end-of-stream marker so the
    consumer can tell that no more input will arrive.
    """

    def __init__(
        self,
        transport: Transport,
        read_size: int = DEFAULT_READ_SIZE,
        framer: Optional[LineFramer] = None,
    ) -> None:
        self._transport = transport
        self._read_size = read_size
        self._framer = framer or LineFramer()
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._trace_id = common.generate_trace_id()
        self._failure: Optional[BaseException] = None
        self._finished = False
        self._received = 0

    # ------------------------------------------------------------------
    # Lifecycle management
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._thread is not None:
            return
        logger.info('Starting ingestion pipeline for %s', self._transport.description)
        self._thread = threading.Thread(
            target=self._run,
            name=f'serial-producer-{self._trace_id[:8]}',
            daemon=True,
        )
        self._thread.start()

    def stop(self, wait: bool = True) -> None:
        """Signal the producer, wait briefly for it to exit, then close the transport.

        The producer notices the stop flag after its current read returns,
        which every transport bounds with a timeout. Closing only afterwards
        keeps ``close()`` from contending with a read still in progress.
        """
        logger.info('Stopping ingestion pipeline for %s', self._transport.description)
        self._stop_event.set()
        if wait and self._thread is not None:
            self._thread.join(timeout=2.0)
            if self._thread.is_alive():
                logger.warning('Producer for %s did not exit in time', self._transport.description)
        self._transport.close()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------
    @property
    def finished(self) -> bool:
        """True once the end-of-stream marker has been received."""
        return self._finished

    @property
    def failure(self) -> Optional[BaseException]:
        """The transport error that ended the producer, if any."""
        return self._failure

    @property
    def received(self) -> int:
        """Number of entries handed to the consumer so far."""
        return self._received

    def poll(self) -> Optional[LogEntry]:
        """Return the next available entry without blocking, or None."""
        if self._finished:
            return None
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        if item is _END_OF_STREAM:
            self._finished = True
            return None
        self._received += 1
        return item

    def drain(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Return every entry available right now, up to ``limit``."""
        entries: List[LogEntry] = []
        while limit is None or len(entries) < limit:
            entry = self.poll()
            if entry is None:
                break
            entries.append(entry)
        return entries

    # ------------------------------------------------------------------
    # Producer loop
    # ------------------------------------------------------------------
    def _run(self) -> None:
        with common.trace_id_scope(self._trace_id):
            try:
                self._produce()
            finally:
                self._queue.put(_END_OF_STREAM)
                logger.info('Ingestion pipeline finished for %s', self._transport.description)

    def _produce(self) -> None:
        while not self._stop_event.is_set():
            try:
                chunk = self._transport.read(self._read_size)
            except TransportTimeout:
                continue
            except TransportClosed as exc:
                if not self._stop_event.is_set():
                    self._flush_pending()
                    self._failure = exc
                    logger.info('Stream closed: %s', exc)
                return
            except Exception as exc:
                self._fail(exc)
                return

            for line in self._framer.feed(chunk):
                self._queue.put(to_entry(line))

    def _flush_pending(self) -> None:
        tail = self._framer.flush()
        if tail is not None:
            self._queue.put(to_entry(tail))

    def _fail(self, exc: BaseException) -> None:
        if self._stop_event.is_set():
            logger.debug('Transport error during shutdown ignored: %s', exc)
            return
        self._failure = exc
        logger.error('Transport read failed, producer stopping: %s', exc)
