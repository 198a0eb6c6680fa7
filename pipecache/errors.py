"""Exception types raised by pipecache."""

from __future__ import annotations


class PipecacheError(Exception):
    """Base class for pipecache failures surfaced to callers."""


class NotFound(PipecacheError, FileNotFoundError):
    """Raised when a source path does not exist at capture or resolve time."""


class DecodeError(PipecacheError, ValueError):
    """Raised when a persisted record cannot be turned back into an entry."""


class CompileError(PipecacheError):
    """Raised when the compilation engine rejects a source file."""
