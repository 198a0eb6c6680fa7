from __future__ import annotations

from pathlib import Path

import pytest

from pipecache.cache import MemoryStore
from pipecache.environment import Environment
from pipecache.errors import CompileError, NotFound


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def env(tmp_path) -> Environment:
    root = tmp_path / "assets"
    root.mkdir()
    return Environment(root, store=MemoryStore())


def _root(env: Environment) -> Path:
    return Path(env.root)


def test_require_strips_directive_and_inherits_extension(env):
    root = _root(env)
    _write(root / "jquery.js", "jquery();\n")
    source = _write(root / "app.js", "// Application\n//= require jquery\n\napp();\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.text == "// Application\n\napp();\n"
    assert evaluation.required_paths == (str(root / "jquery.js"),)
    assert evaluation.dependency_assets == (str(root / "jquery.js"),)
    assert evaluation.dependency_paths == ()


def test_hash_and_block_comment_headers(env):
    root = _root(env)
    _write(root / "base.css", "body {}\n")
    _write(root / "reset.css", "* {}\n")
    source = _write(
        root / "site.css",
        "/*\n *= require reset\n *= require base\n */\nh1 {}\n",
    )
    script = _write(root / "tool.coffee", "#= require helper\nrun()\n")
    _write(root / "helper.coffee", "helper = 1\n")

    css = env.engine.evaluate(source)
    coffee = env.engine.evaluate(script)

    assert css.required_paths == (str(root / "reset.css"), str(root / "base.css"))
    assert css.text == "/*\n */\nh1 {}\n"
    assert coffee.required_paths == (str(root / "helper.coffee"),)


def test_directives_after_code_are_ignored(env):
    root = _root(env)
    _write(root / "jquery.js", "jquery();\n")
    source = _write(root / "app.js", "app();\n//= require jquery\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.text == "app();\n//= require jquery\n"
    assert evaluation.required_paths == ()


def test_require_directory_sorts_and_tracks_directory(env):
    root = _root(env)
    _write(root / "widgets" / "b.js", "b\n")
    _write(root / "widgets" / "a.js", "a\n")
    _write(root / "widgets" / "skip.css", "c\n")
    source = _write(root / "app.js", "//= require_directory ./widgets\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.required_paths == (
        str(root / "widgets" / "a.js"),
        str(root / "widgets" / "b.js"),
    )
    assert evaluation.dependency_paths == (str(root / "widgets"),)


def test_require_directory_rejects_files(env):
    root = _root(env)
    _write(root / "lib.js", "lib\n")
    source = _write(root / "app.js", "//= require_directory lib.js\n")

    with pytest.raises(CompileError):
        env.engine.evaluate(source)


def test_depend_on_and_depend_on_asset(env):
    root = _root(env)
    _write(root / "config.yml", "a: 1\n")
    _write(root / "theme.js", "theme\n")
    source = _write(root / "app.js", "//= depend_on config.yml\n//= depend_on_asset theme\napp\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.required_paths == ()
    assert evaluation.dependency_paths == (str(root / "config.yml"),)
    assert evaluation.dependency_assets == (str(root / "theme.js"),)
    assert evaluation.text == "app\n"


def test_relative_require_resolves_from_source_directory(env):
    root = _root(env)
    _write(root / "pages" / "lib" / "util.js", "util\n")
    source = _write(root / "pages" / "home.js", "//= require ./lib/util\nhome\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.required_paths == (str(root / "pages" / "lib" / "util.js"),)


def test_repeated_require_is_reported_once(env):
    root = _root(env)
    _write(root / "jquery.js", "jquery\n")
    source = _write(root / "app.js", "//= require jquery\n//= require jquery.js\n")

    evaluation = env.engine.evaluate(source)

    assert evaluation.required_paths == (str(root / "jquery.js"),)


def test_unknown_directive_fails(env):
    source = _write(_root(env) / "app.js", "//= include jquery\n")

    with pytest.raises(CompileError):
        env.engine.evaluate(source)


def test_directive_without_argument_fails(env):
    source = _write(_root(env) / "app.js", "//= require\n")

    with pytest.raises(CompileError):
        env.engine.evaluate(source)


def test_missing_required_file_fails(env):
    source = _write(_root(env) / "app.js", "//= require nope\n")

    with pytest.raises(NotFound):
        env.engine.evaluate(source)


def test_non_utf8_source_is_a_compile_error(env):
    source = _root(env) / "app.js"
    source.write_bytes(b"\xff\xfe bad();\n")

    with pytest.raises(CompileError, match="not valid UTF-8"):
        env.engine.evaluate(source)
