"""Status markup for the check table, with an ASCII fallback."""

from __future__ import annotations

import sys

from rich.console import Console

_MARKS = {True: ("✓", "OK"), False: ("✗", "X")}


def _can_encode(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def format_freshness(fresh: bool, console: Console | None = None) -> str:
    """Return rich markup such as ``[green]✓ fresh[/green]`` for one dependency row."""
    glyph, fallback = _MARKS[fresh]
    encoding = console.encoding if console is not None else None
    if not (_can_encode(glyph, encoding) or _can_encode(glyph, sys.stdout.encoding)):
        glyph = fallback
    color = "green" if fresh else "red"
    label = "fresh" if fresh else "stale"
    return f"[{color}]{glyph} {label}[/{color}]"
