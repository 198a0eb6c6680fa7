"""Atomic output writing for compiled artifacts."""

from __future__ import annotations

import gzip
import os
from datetime import datetime
from pathlib import Path


def write_output(
    body: str,
    filename: Path | str,
    mtime: datetime,
    *,
    compress: bool | None = None,
) -> Path:
    """Write *body* to *filename* through a temporary sibling and rename it.

    Gzip is used when *compress* is true, or when it is None and the name ends
    in ``.gz``; the gzip header holds *mtime* and no file name. The written file
    carries *mtime* rather than the write time.
    """
    target = Path(filename)
    if compress is None:
        compress = target.suffix == ".gz"
    temp = target.with_name(f"{target.name}+")
    target.parent.mkdir(parents=True, exist_ok=True)
    data = body.encode("utf-8")
    timestamp = mtime.timestamp()
    try:
        with temp.open("wb") as handle:
            if compress:
                with gzip.GzipFile(
                    filename="", fileobj=handle, mode="wb", compresslevel=9, mtime=int(timestamp)
                ) as gz:
                    gz.write(data)
            else:
                handle.write(data)
        os.replace(temp, target)
        os.utime(target, (timestamp, timestamp))
    finally:
        if temp.exists():
            temp.unlink()
    return target
