"""pipecache package initialization."""

from __future__ import annotations

from .api import check, compile_bundle, expire, open_environment, set_data_dir
from .builder import build_artifact
from .codec import DecodeResult, decode_entry, encode_entry, try_decode
from .entries import SELF, CompiledArtifact, Entry, EntryKind, RawFile
from .environment import Environment
from .errors import CompileError, DecodeError, NotFound, PipecacheError
from .freshness import is_fresh, is_stale
from .records import FileRecord

__all__ = [
    "__version__",
    "SELF",
    "CompileError",
    "CompiledArtifact",
    "DecodeError",
    "DecodeResult",
    "Entry",
    "EntryKind",
    "Environment",
    "FileRecord",
    "NotFound",
    "PipecacheError",
    "RawFile",
    "build_artifact",
    "check",
    "compile_bundle",
    "decode_entry",
    "encode_entry",
    "expire",
    "get_version",
    "is_fresh",
    "is_stale",
    "open_environment",
    "set_data_dir",
    "try_decode",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
