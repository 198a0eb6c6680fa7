"""Relocatable serialization of dependency graph entries.

Records are flat JSON-compatible dicts. Absolute paths are stored with the
environment root replaced by ``$root`` so a cache written in one checkout can
be read from another. Nested references are stored as paths and resolved again
through the resolver when the record is decoded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from .entries import SELF, CompiledArtifact, EntryKind, RawFile
from .errors import DecodeError
from .utils import expand_root_path, parse_timestamp, relativize_root_path

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .entries import Entry
    from .resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    entry: "Entry | None" = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.entry is not None


def encode_entry(entry: "Entry", root: str) -> dict[str, Any]:
    record: dict[str, Any] = {
        "class": entry.kind.value,
        "logical_path": entry.logical_path,
        "pathname": relativize_root_path(entry.path, root),
        "mtime": entry.mtime.isoformat(),
        "digest": entry.digest,
    }
    if isinstance(entry, CompiledArtifact):
        record["content_type"] = entry.content_type
        record["length"] = entry.length
        record["source"] = entry.compiled_output
        record["required_paths"] = [
            relativize_root_path(artifact.path, root) for artifact in entry.required_artifacts
        ]
        record["dependency_paths"] = [
            _encode_dependency(dep, root) for dep in entry.freshness_deps
        ]
    return record


def _encode_dependency(dep: "Entry | None", root: str) -> list[Any]:
    if dep is None:
        raise ValueError("Cannot encode an unresolved freshness dependency")
    # The build-time snapshot travels with the path; the live file may differ by
    # the time the record is read back.
    return [
        isinstance(dep, CompiledArtifact),
        relativize_root_path(dep.path, root),
        dep.mtime.isoformat(),
        dep.digest,
    ]


def decode_entry(record: object, resolver: "Resolver") -> "Entry":
    """Rebuild an entry from *record*; raises DecodeError on any malformed input."""
    if not isinstance(record, Mapping):
        raise DecodeError(f"Expected a mapping, got {type(record).__name__}")
    tag = record.get("class")
    try:
        kind = EntryKind(tag)
    except ValueError as exc:
        raise DecodeError(f"Unknown entry class: {tag!r}") from exc
    return _DECODERS[kind](record, resolver)


def try_decode(record: object, resolver: "Resolver") -> DecodeResult:
    """Decode *record*, turning every failure into an empty result."""
    try:
        return DecodeResult(entry=decode_entry(record, resolver))
    except Exception as exc:
        logger.debug("Discarding undecodable cache record: %s", exc)
        return DecodeResult(error=exc)


def _require(record: Mapping, key: str) -> Any:
    value = record.get(key)
    if value is None:
        raise DecodeError(f"Missing field: {key}")
    return value


def _expand(raw_path: object, root: str) -> str:
    return str(Path(expand_root_path(str(raw_path), root)))


def _base_fields(record: Mapping, root: str) -> dict[str, Any]:
    pathname = expand_root_path(str(_require(record, "pathname")), root)
    try:
        mtime = parse_timestamp(str(_require(record, "mtime")))
    except ValueError as exc:
        raise DecodeError(f"Invalid mtime: {record.get('mtime')!r}") from exc
    return {
        "path": Path(pathname),
        "logical_path": str(_require(record, "logical_path")),
        "mtime": mtime,
        "digest": str(_require(record, "digest")),
    }


def _decode_raw_file(record: Mapping, resolver: "Resolver") -> RawFile:
    return RawFile(**_base_fields(record, resolver.root))


def _decode_compiled_artifact(record: Mapping, resolver: "Resolver") -> CompiledArtifact:
    fields = _base_fields(record, resolver.root)
    own_path = str(fields["path"])

    required: list[object] = []
    for raw_path in _require(record, "required_paths"):
        path = _expand(raw_path, resolver.root)
        if path == own_path:
            required.append(SELF)
            continue
        artifact = resolver.find_entry(path, bundle=False)
        if artifact is None:
            raise DecodeError(f"Unresolved required path: {path}")
        required.append(artifact)

    dependencies: list[object] = []
    for item in _require(record, "dependency_paths"):
        is_artifact, raw_path, *snapshot = item
        path = _expand(raw_path, resolver.root)
        if path == own_path:
            dependencies.append(SELF)
        elif is_artifact:
            dependencies.append(_with_snapshot(resolver.find_entry(path, bundle=False), snapshot))
        else:
            dependencies.append(_with_snapshot(resolver.find_raw_dependency(path), snapshot))

    return CompiledArtifact(
        **fields,
        compiled_output=str(_require(record, "source")),
        required_artifacts=tuple(required),
        freshness_deps=tuple(dependencies),
        content_type=record.get("content_type") or None,
        length=int(record.get("length") or 0),
    )


def _with_snapshot(dep: "Entry | None", snapshot: list[Any]) -> "Entry | None":
    """Pin *dep* to the mtime and digest it had when the record was written."""
    if dep is None or not snapshot:
        return dep
    stored_mtime, stored_digest = snapshot
    try:
        mtime = parse_timestamp(str(stored_mtime))
    except ValueError as exc:
        raise DecodeError(f"Invalid dependency mtime: {stored_mtime!r}") from exc
    digest = str(stored_digest)
    if dep.mtime == mtime and dep.digest == digest:
        return dep
    return replace(dep, mtime=mtime, digest=digest)


_DECODERS: dict[EntryKind, Callable[[Mapping, "Resolver"], "Entry"]] = {
    EntryKind.RAW_FILE: _decode_raw_file,
    EntryKind.COMPILED_ARTIFACT: _decode_compiled_artifact,
}
