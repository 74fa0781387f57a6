"""Audit sinks - destinations for audit events."""

from .base import AuditSink
from .console import ConsoleSink
from .file import FileSink
from .log import LogSink

__all__ = [
    "AuditSink",
    "ConsoleSink",
    "FileSink",
    "LogSink",
]
