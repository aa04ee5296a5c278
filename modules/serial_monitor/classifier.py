"""Severity classification for framed log lines."""

from __future__ import annotations

from .models import LogEntry, Severity

# Plain substring matches against the lowercased line. "err" also covers
# "error", and also words such as "errand".
ERROR_MARKERS = ('err',)
WARNING_MARKERS = ('wrn', 'warn')


def classify(line: str) -> Severity:
    """Return the severity of ``line``; error markers win over warning markers."""
    lowered = line.lower()
    if any(marker in lowered for marker in ERROR_MARKERS):
        return Severity.ERROR
    if any(marker in lowered for marker in WARNING_MARKERS):
        return Severity.WARNING
    return Severity.INFO


def to_entry(line: str) -> LogEntry:
    """Classify ``line`` and wrap it as a :class:`LogEntry`."""
    return LogEntry(text=line, severity=classify(line))
