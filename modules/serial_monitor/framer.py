"""Reassembles raw byte chunks into complete text lines."""

from __future__ import annotations

import codecs
from typing import Iterator, Optional


class LineFramer:
    """Turns an unbounded sequence of byte chunks into complete lines.

    A partial line is carried across calls to :meth:`feed` until a ``\\n``
    terminates it. The ``\\n`` and one ``\\r`` directly before it are stripped,
    so a ``\\r\\n`` pair split across two chunks still produces a single line.

    Decoding is lossy: invalid byte sequences become U+FFFD and never raise.
    An incremental decoder keeps multi-byte characters that straddle a chunk
    boundary intact.
    """

    def __init__(self, encoding: str = 'utf-8') -> None:
        self._encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors='replace')
        self._text = ''

    @property
    def pending(self) -> str:
        """Decoded text not yet returned as a line."""
        return self._text

    def feed(self, chunk: bytes) -> Iterator[str]:
        """Consume ``chunk`` and return an iterator over the completed lines.

        The chunk is decoded and buffered immediately; lines are split off as
        the returned iterator is consumed. Lines left unconsumed stay buffered
        and are returned by the iterator of the next :meth:`feed`.
        """
        if chunk:
            self._text += self._decoder.decode(chunk)
        return self._split()

    def _split(self) -> Iterator[str]:
        while True:
            end = self._text.find('\n')
            if end < 0:
                return
            line, self._text = self._text[:end], self._text[end + 1:]
            if line.endswith('\r'):
                line = line[:-1]
            yield line

    def flush(self) -> Optional[str]:
        """Return the unterminated remainder, if any, and clear it."""
        self._text += self._decoder.decode(b'', final=True)
        if not self._text:
            return None
        line, self._text = self._text, ''
        return line

    def reset(self) -> None:
        """Discard any partial line and decoder state."""
        self._decoder.reset()
        self._text = ''
