"""Default compilation engine driven by header comment directives.

A source file may open with a comment block holding lines such as::

    //= require jquery
    //= require_directory ./widgets
    //= depend_on config.yml

The directive lines are stripped from the output and reported as required or
dependency paths; everything else is passed through unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import CompileError
from .resolver import Evaluation

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .environment import Environment

_DIRECTIVE_RE = re.compile(r"^\s*(?://|#|\*)=\s*(?P<name>\w+)(?:\s+(?P<arg>.*?))?\s*$")
_HEADER_PREFIXES = ("//", "#", "/*", "*")


@dataclass
class _Report:
    required: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    assets: list[str] = field(default_factory=list)

    @staticmethod
    def _append(target: list[str], path: Path) -> None:
        value = str(path)
        if value not in target:
            target.append(value)

    def require(self, path: Path) -> None:
        self._append(self.required, path)
        self._append(self.assets, path)

    def depend_on(self, path: Path) -> None:
        self._append(self.dependencies, path)

    def depend_on_asset(self, path: Path) -> None:
        self._append(self.assets, path)


def _is_header_line(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith(_HEADER_PREFIXES)


class DirectiveEngine:
    def __init__(self, environment: "Environment") -> None:
        self.environment = environment

    def evaluate(self, path: Path) -> Evaluation:
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CompileError(f"{source}: source is not valid UTF-8 ({exc.reason})") from exc
        report = _Report()
        kept: list[str] = []
        in_header = True
        for line in text.splitlines(keepends=True):
            if in_header and not _is_header_line(line):
                in_header = False
            if in_header:
                match = _DIRECTIVE_RE.match(line)
                if match:
                    self._apply(source, match.group("name"), (match.group("arg") or "").strip(), report)
                    continue
            kept.append(line)
        return Evaluation(
            text="".join(kept),
            required_paths=tuple(report.required),
            dependency_paths=tuple(report.dependencies),
            dependency_assets=tuple(report.assets),
        )

    def _apply(self, source: Path, name: str, arg: str, report: _Report) -> None:
        if not arg:
            raise CompileError(f"{source}: directive '{name}' needs an argument")
        if name == "require":
            report.require(self._resolve(arg, source, inherit_extension=True))
        elif name == "require_directory":
            directory = self._resolve(arg, source, inherit_extension=False)
            if not directory.is_dir():
                raise CompileError(f"{source}: require_directory argument must be a directory")
            for candidate in sorted(directory.iterdir()):
                if candidate.is_file() and candidate.suffix == source.suffix and candidate != source:
                    report.require(candidate)
            report.depend_on(directory)
        elif name == "depend_on":
            report.depend_on(self._resolve(arg, source, inherit_extension=False))
        elif name == "depend_on_asset":
            report.depend_on_asset(self._resolve(arg, source, inherit_extension=True))
        else:
            raise CompileError(f"{source}: unknown directive '{name}'")

    def _resolve(self, name: str, source: Path, *, inherit_extension: bool) -> Path:
        if inherit_extension and not Path(name).suffix:
            name = f"{name}{source.suffix}"
        if name.startswith(("./", "../")):
            return self.environment.resolve_relative(name, source.parent)
        return self.environment.resolve(name)
