"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

import hashlib
import os
import re
from datetime import datetime, timezone
from pathlib import Path

ROOT_PLACEHOLDER = "$root"
_DIGEST_CHUNK_BYTES = 1024 * 128
_EXTENSION_RE = re.compile(r"\.(\w+)$")


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(f"Directory does not exist: {dir_path}")
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    return dir_path


def file_digest(path: Path | str, algorithm: str = "sha256") -> str:
    """Return the hex digest of a file's bytes.

    Directories digest the sorted names of their entries, so adding or
    removing a file changes the digest while touching one does not.
    """
    digest = hashlib.new(algorithm)
    target = Path(path)
    if target.is_dir():
        names = sorted(entry.name for entry in os.scandir(target))
        digest.update(",".join(names).encode("utf-8"))
        return digest.hexdigest()
    with target.open("rb") as handle:
        while True:
            chunk = handle.read(_DIGEST_CHUNK_BYTES)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def timestamp_to_datetime(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _trim_root(root: str) -> str:
    return root.rstrip("/" + os.sep)


def _has_root_prefix(path: str, root: str) -> bool:
    if not root or not path.startswith(root):
        return False
    return len(path) == len(root) or path[len(root)] in ("/", os.sep)


def relativize_root_path(path: Path | str, root: str) -> str:
    """Replace a leading *root* with the ``$root`` placeholder."""
    text = str(path)
    root = _trim_root(root)
    if _has_root_prefix(text, root):
        return ROOT_PLACEHOLDER + text[len(root) :]
    return text


def expand_root_path(path: str, root: str) -> str:
    """Replace a leading ``$root`` placeholder with *root*."""
    if _has_root_prefix(path, ROOT_PLACEHOLDER):
        return _trim_root(root) + path[len(ROOT_PLACEHOLDER) :]
    return path


def splice_digest(logical_path: str, digest: str) -> str:
    """Insert *digest* before the extension: ``foo/bar.js`` -> ``foo/bar-<digest>.js``."""
    return _EXTENSION_RE.sub(lambda match: f"-{digest}{match.group(0)}", logical_path)


def relative_posix(path: Path, base: Path) -> str | None:
    try:
        rel = path.relative_to(base)
    except ValueError:
        return None
    return rel.as_posix()


def format_path(path: Path, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    if base:
        try:
            relative = path.relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)
