"""Logic helpers for the `pipecache compile` command."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..entries import CompiledArtifact
from ..environment import Environment
from ..utils import splice_digest
from ..writer import write_output


class CompileStatus(str, Enum):
    COMPILED = "compiled"
    WRITTEN = "written"


@dataclass(slots=True)
class CompileResult:
    status: CompileStatus
    artifact: CompiledArtifact
    body: str
    output_path: Path | None = None


def bundle_digest_path(env: Environment, artifact: CompiledArtifact, body: str) -> str:
    """Output name for a bundle, keyed on the bundled bytes rather than the source."""

    digest = hashlib.new(env.digest_algorithm, body.encode("utf-8")).hexdigest()
    return splice_digest(artifact.logical_path, digest)


def compile_asset(
    env: Environment,
    logical_path: str,
    output_dir: Path | str | None = None,
    *,
    compress: bool = False,
) -> CompileResult:
    """Return the bundled artifact for *logical_path*, optionally writing it out."""

    artifact = env.find_asset(logical_path)
    body = artifact.bundle()
    if output_dir is None:
        return CompileResult(status=CompileStatus.COMPILED, artifact=artifact, body=body)

    target = Path(output_dir) / bundle_digest_path(env, artifact, body)
    if compress:
        target = target.with_name(f"{target.name}.gz")
    write_output(body, target, artifact.mtime, compress=compress)
    return CompileResult(
        status=CompileStatus.WRITTEN,
        artifact=artifact,
        body=body,
        output_path=target,
    )
