"""Identity snapshot of a single source path."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import NotFound

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .resolver import Resolver


@dataclass(frozen=True, slots=True, eq=False)
class FileRecord:
    """Path, logical name, mtime and digest captured at one point in time.

    Two records are equal when they are the same class and share logical path,
    mtime and digest. The resolved path is left out so that a record restored
    under a different root still compares equal.
    """

    path: Path
    logical_path: str
    mtime: datetime
    digest: str

    @classmethod
    def capture(cls, resolver: "Resolver", path: Path | str, logical_path: str):
        stat = resolver.stat(path)
        if stat is None:
            raise NotFound(f"No such file: {path}")
        return cls(
            path=Path(path),
            logical_path=str(logical_path),
            mtime=stat.mtime,
            digest=resolver.digest(path),
        )

    def is_fresh(self, resolver: "Resolver") -> bool:
        """Return True when the live file still matches this record."""
        stat = resolver.stat(self.path)
        if stat is None:
            return False
        # A record taken at or after the last modification is trusted as is.
        if self.mtime >= stat.mtime:
            return True
        # Newer mtime: recopies and fresh checkouts bump it without changing
        # content, so only the digest decides.
        return self.digest == resolver.digest(self.path)

    def is_stale(self, resolver: "Resolver") -> bool:
        return not self.is_fresh(resolver)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self.logical_path == other.logical_path
            and self.mtime == other.mtime
            and self.digest == other.digest
        )

    def __hash__(self) -> int:
        return hash(self.digest)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} pathname={str(self.path)!r}, "
            f"mtime={self.mtime.isoformat()!r}, digest={self.digest!r}>"
        )
