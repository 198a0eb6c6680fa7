from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pipecache.builder import build_artifact
from pipecache.entries import SELF, CompiledArtifact, RawFile
from pipecache.errors import NotFound
from pipecache.resolver import Evaluation, FileStat

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class StubResolver:
    root = "/src"

    def __init__(self) -> None:
        self.stats: dict[str, FileStat] = {}
        self.digests: dict[str, str] = {}
        self.entries: dict[str, CompiledArtifact] = {}
        self.raw: dict[str, RawFile] = {}

    def put_file(self, name: str, digest: str | None = None) -> str:
        path = f"/src/{name}"
        self.stats[path] = FileStat(mtime=T0, size=1)
        self.digests[path] = digest or f"d-{name}"
        return path

    def stat(self, path):
        return self.stats.get(str(path))

    def digest(self, path):
        return self.digests[str(path)]

    def find_entry(self, path, bundle=False):
        return self.entries.get(str(path))

    def find_raw_dependency(self, path):
        return self.raw.get(str(path))


class FakeEngine:
    def __init__(self, evaluations: dict[str, Evaluation]) -> None:
        self.evaluations = evaluations
        self.calls: list[Path] = []

    def evaluate(self, path):
        self.calls.append(path)
        return self.evaluations[str(path)]


def _artifact(name: str, requires=(), deps=None) -> CompiledArtifact:
    return CompiledArtifact(
        path=Path("/src") / name,
        logical_path=name,
        mtime=T0,
        digest=f"d-{name}",
        compiled_output=f"{name}\n",
        required_artifacts=tuple(requires) + (SELF,),
        freshness_deps=tuple(requires if deps is None else deps) + (SELF,),
    )


def _names(items) -> list[str]:
    return [item.logical_path for item in items]


def test_simple_build_includes_itself_last():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    engine = FakeEngine({path: Evaluation(text="app();\n")})

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert artifact.compiled_output == "app();\n"
    assert artifact.required_artifacts == (artifact,)
    assert artifact.required_artifacts[0] is artifact
    assert artifact.freshness_deps[0] is artifact
    assert artifact.digest == "d-app.js"
    assert artifact.mtime == T0
    assert artifact.length == len(b"app();\n")
    assert artifact.content_type in {"application/javascript", "text/javascript"}
    assert engine.calls == [Path(path)]


def test_required_closure_is_flattened_and_deduplicated():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    shared = _artifact("shared.js")
    left = _artifact("left.js", requires=(shared,))
    right = _artifact("right.js", requires=(shared,))
    resolver.entries["/src/left.js"] = left
    resolver.entries["/src/right.js"] = right
    engine = FakeEngine(
        {
            path: Evaluation(
                text="app();\n",
                required_paths=("/src/left.js", "/src/right.js"),
                dependency_assets=("/src/left.js", "/src/right.js"),
            )
        }
    )

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert _names(artifact.required_artifacts) == ["shared.js", "left.js", "right.js", "app.js"]
    assert artifact.required_artifacts[0] is shared
    assert artifact.required_artifacts[-1] is artifact
    assert _names(artifact.freshness_deps) == ["shared.js", "left.js", "right.js", "app.js"]
    assert artifact.bundle() == "shared.js\nleft.js\nright.js\napp();\n"


def test_equal_entries_from_different_branches_count_once():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    # Two distinct objects for the same file, as produced by two decodes.
    shared_one = _artifact("shared.js")
    shared_two = _artifact("shared.js")
    resolver.entries["/src/left.js"] = _artifact("left.js", requires=(shared_one,))
    resolver.entries["/src/right.js"] = _artifact("right.js", requires=(shared_two,))
    engine = FakeEngine(
        {path: Evaluation(text="", required_paths=("/src/left.js", "/src/right.js"))}
    )

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert _names(artifact.required_artifacts) == ["shared.js", "left.js", "right.js", "app.js"]


def test_self_reference_is_included_once():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    engine = FakeEngine(
        {path: Evaluation(text="", required_paths=(path,), dependency_paths=(path,))}
    )

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert artifact.required_artifacts == (artifact,)
    assert artifact.freshness_deps == (artifact,)


def test_older_copy_of_itself_in_a_dependency_is_treated_as_self():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    stale_app = _artifact("app.js")
    resolver.entries["/src/helper.js"] = _artifact("helper.js", requires=(), deps=(stale_app,))
    engine = FakeEngine({path: Evaluation(text="", dependency_assets=("/src/helper.js",))})

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert _names(artifact.freshness_deps) == ["app.js", "helper.js"]
    assert artifact.freshness_deps[0] is artifact
    assert all(dep is not stale_app for dep in artifact.freshness_deps)


def test_raw_dependencies_come_before_asset_closures():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    config = RawFile(path=Path("/src/config.yml"), logical_path="config.yml", mtime=T0, digest="c")
    resolver.raw["/src/config.yml"] = config
    jquery = _artifact("jquery.js")
    resolver.entries["/src/jquery.js"] = jquery
    engine = FakeEngine(
        {
            path: Evaluation(
                text="app();\n",
                required_paths=("/src/jquery.js",),
                dependency_paths=("/src/config.yml",),
                dependency_assets=("/src/jquery.js",),
            )
        }
    )

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert _names(artifact.required_artifacts) == ["jquery.js", "app.js"]
    assert artifact.freshness_deps == (config, jquery, artifact)


def test_unresolved_paths_are_skipped():
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    engine = FakeEngine(
        {
            path: Evaluation(
                text="",
                required_paths=("/src/missing.js",),
                dependency_paths=("/src/gone.yml",),
                dependency_assets=("/src/missing.js",),
            )
        }
    )

    artifact = build_artifact(resolver, engine, "app.js", path)

    assert artifact.required_artifacts == (artifact,)
    assert artifact.freshness_deps == (artifact,)
    assert None not in artifact.freshness_deps


def test_missing_source_raises_not_found():
    resolver = StubResolver()
    engine = FakeEngine({})

    with pytest.raises(NotFound):
        build_artifact(resolver, engine, "app.js", "/src/app.js")
    assert engine.calls == []


def test_build_logs_compile_line(caplog):
    resolver = StubResolver()
    path = resolver.put_file("app.js")
    engine = FakeEngine({path: Evaluation(text="")})
    caplog.set_level(logging.INFO, logger="pipecache")

    build_artifact(resolver, engine, "app.js", path)

    assert any("Compiled app.js" in message for message in caplog.messages)
