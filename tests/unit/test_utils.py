from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path

import pytest

import pipecache.utils as utils


def test_resolve_directory_validates(tmp_path):
    with pytest.raises(FileNotFoundError):
        utils.resolve_directory(tmp_path / "missing")

    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        utils.resolve_directory(file_path)

    assert utils.resolve_directory(tmp_path) == tmp_path.resolve()


def test_file_digest_matches_hashlib(tmp_path):
    file_path = tmp_path / "app.js"
    payload = b"x" * (300 * 1024)
    file_path.write_bytes(payload)

    assert utils.file_digest(file_path) == hashlib.sha256(payload).hexdigest()
    assert utils.file_digest(file_path, "md5") == hashlib.md5(payload).hexdigest()


def test_directory_digest_tracks_membership_only(tmp_path):
    directory = tmp_path / "widgets"
    directory.mkdir()
    (directory / "a.js").write_text("a", encoding="utf-8")
    before = utils.file_digest(directory)

    (directory / "a.js").write_text("changed", encoding="utf-8")
    assert utils.file_digest(directory) == before

    (directory / "b.js").write_text("b", encoding="utf-8")
    assert utils.file_digest(directory) != before


def test_timestamps_are_utc():
    stamp = utils.timestamp_to_datetime(0)
    assert stamp == datetime(1970, 1, 1, tzinfo=timezone.utc)

    parsed = utils.parse_timestamp("2024-01-01T10:00:00.250000+00:00")
    assert parsed == datetime(2024, 1, 1, 10, 0, 0, 250000, tzinfo=timezone.utc)

    naive = utils.parse_timestamp("2024-01-01T10:00:00")
    assert naive.tzinfo is timezone.utc

    with pytest.raises(ValueError):
        utils.parse_timestamp("last tuesday")


def test_root_placeholder_round_trip():
    encoded = utils.relativize_root_path(Path("/srv/app/assets/app.js"), "/srv/app")

    assert encoded == "$root/assets/app.js"
    assert utils.expand_root_path(encoded, "/home/dev/app") == "/home/dev/app/assets/app.js"


def test_root_placeholder_applies_once_at_start():
    assert utils.relativize_root_path("/srv/app/srv/app/x.js", "/srv/app") == "$root/srv/app/x.js"
    assert utils.relativize_root_path("/srv/application/x.js", "/srv/app") == "/srv/application/x.js"
    assert utils.relativize_root_path("/srv/app/x.js", "") == "/srv/app/x.js"
    assert utils.relativize_root_path("/srv/app/x.js", "/srv/app/") == "$root/x.js"
    assert utils.expand_root_path("/tmp/$root/x.js", "/srv") == "/tmp/$root/x.js"


def test_splice_digest():
    assert utils.splice_digest("foo/bar.js", "abc") == "foo/bar-abc.js"
    assert utils.splice_digest("app.min.css", "abc") == "app.min-abc.css"
    assert utils.splice_digest("LICENSE", "abc") == "LICENSE"


def test_relative_posix_and_format_path(tmp_path):
    child = tmp_path / "a" / "b.js"

    assert utils.relative_posix(child, tmp_path) == "a/b.js"
    assert utils.relative_posix(Path("/elsewhere/x.js"), tmp_path) is None
    assert utils.format_path(child, tmp_path) == "./a/b.js"
    assert utils.format_path(child) == str(child)
    assert utils.format_path(Path("/elsewhere/x.js"), tmp_path) == "/elsewhere/x.js"


def test_expand_root_requires_segment_boundary():
    assert utils.expand_root_path("$rootfoo/x.js", "/srv") == "$rootfoo/x.js"
    assert utils.expand_root_path("$root", "/srv/") == "/srv"
    assert utils.expand_root_path("$root/x.js", "/srv/") == "/srv/x.js"
