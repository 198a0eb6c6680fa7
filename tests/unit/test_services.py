from __future__ import annotations

import gzip
import hashlib
import os
from pathlib import Path

import pytest

from pipecache.cache import MemoryStore
from pipecache.config import Config
from pipecache.errors import NotFound
from pipecache.services.cache_service import build_environment, check_asset
from pipecache.services.compile_service import (
    CompileStatus,
    bundle_digest_path,
    compile_asset,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def env(tmp_path):
    root = tmp_path / "project"
    _write(root / "assets" / "app.js", "//= require lib\n//= depend_on ../settings.yml\napp();\n")
    _write(root / "assets" / "lib.js", "lib();\n")
    _write(root / "settings.yml", "a: 1\n")
    config = Config(root=str(root), load_paths=("assets",))
    return build_environment(config, store=MemoryStore())


def test_build_environment_uses_config(tmp_path):
    config = Config(root=str(tmp_path), load_paths=("src", "vendor"), digest_algorithm="md5")

    env = build_environment(config, store=MemoryStore())

    assert env.root == str(tmp_path.resolve())
    assert env.load_paths == (tmp_path.resolve() / "src", tmp_path.resolve() / "vendor")
    assert env.digest_algorithm == "md5"


def test_compile_asset_without_output(env):
    result = compile_asset(env, "app.js")

    assert result.status is CompileStatus.COMPILED
    assert result.body == "lib();\napp();\n"
    assert result.output_path is None
    assert result.artifact.logical_path == "app.js"


def test_compile_asset_writes_digest_named_bundle(env, tmp_path):
    out_dir = tmp_path / "public"

    result = compile_asset(env, "app.js", out_dir)

    digest = hashlib.sha256(b"lib();\napp();\n").hexdigest()
    assert result.status is CompileStatus.WRITTEN
    assert result.output_path == out_dir / f"app-{digest}.js"
    assert result.output_path.read_text(encoding="utf-8") == "lib();\napp();\n"
    assert os.stat(result.output_path).st_mtime == pytest.approx(result.artifact.mtime.timestamp())
    assert bundle_digest_path(env, result.artifact, result.body) == f"app-{digest}.js"


def test_compile_asset_gzip(env, tmp_path):
    result = compile_asset(env, "app.js", tmp_path / "public", compress=True)

    assert result.output_path.name.endswith(".js.gz")
    assert gzip.decompress(result.output_path.read_bytes()) == b"lib();\napp();\n"


def test_compile_asset_missing(env):
    with pytest.raises(NotFound):
        compile_asset(env, "missing.js")


def test_check_asset_not_cached(env):
    report = check_asset(env, "app.js")

    assert report.cached is False
    assert report.fresh is False
    assert report.dependencies == []


def test_check_asset_reports_dependencies(env):
    compile_asset(env, "app.js")

    report = check_asset(env, "app.js")

    assert report.cached is True
    assert report.fresh is True
    assert [(dep.logical_path, dep.kind, dep.fresh) for dep in report.dependencies] == [
        ("settings.yml", "RawFile", True),
        ("lib.js", "CompiledArtifact", True),
        ("app.js", "CompiledArtifact", True),
    ]


def test_check_asset_flags_changed_dependency(env):
    compile_asset(env, "app.js")
    settings = Path(env.root) / "settings.yml"
    settings.write_text("a: 2\n", encoding="utf-8")
    stat = settings.stat()
    os.utime(settings, (stat.st_atime + 10, stat.st_mtime + 10))

    report = check_asset(env, "app.js")

    assert report.cached is True
    assert report.fresh is False
    stale = [dep.logical_path for dep in report.dependencies if not dep.fresh]
    assert stale == ["settings.yml"]


def test_check_asset_reports_unresolved_dependency(env):
    compile_asset(env, "app.js")
    (Path(env.root) / "settings.yml").unlink()

    report = check_asset(env, "app.js")

    assert report.fresh is False
    assert report.dependencies[0].logical_path == "(unresolved)"
    assert report.dependencies[0].path is None
