from __future__ import annotations

import asyncio
import os

import pytest

from src.services.file_catalog import (
    DirectoryAccessError,
    DirectoryEntry,
    classify_entries,
    ensure_within_root,
    has_hidden_segment,
    is_within_root,
    numeric_prefix,
    resolve_request_path,
    sort_by_name,
    sort_by_numeric_prefix,
)


def _names(entries):
    return [entry.name for entry in entries]


def test_resolve_root_and_subdirectory():
    assert resolve_request_path("/srv/www", "/", "/") == "/srv/www"
    assert resolve_request_path("/srv/www", "/", "/docs/") == "/srv/www/docs"


def test_resolve_strips_base_dir():
    assert resolve_request_path("/srv/www", "/files", "/files/a/b") == "/srv/www/a/b"
    assert resolve_request_path("/srv/www", "files/", "/files") == "/srv/www"


def test_resolve_normalizes_dot_segments():
    assert resolve_request_path("/srv/www", "/", "/a/./b/../c") == "/srv/www/a/c"
    assert resolve_request_path("/srv/www", "/", "/../../etc/passwd") == "/srv/www/etc/passwd"


def test_path_outside_base_escapes_root_and_is_rejected():
    resolved = resolve_request_path("/srv/www", "/files", "/other/x")
    assert resolved == "/srv/other/x"
    assert not is_within_root("/srv/www", resolved)
    with pytest.raises(DirectoryAccessError):
        ensure_within_root("/srv/www", resolved)


def test_containment_is_not_fooled_by_shared_prefix():
    assert is_within_root("/srv/www", "/srv/www")
    assert is_within_root("/srv/www", "/srv/www/a")
    assert not is_within_root("/srv/www", "/srv/www-private")


def test_classify_buckets_every_name_once(tree):
    names = os.listdir(tree) + ["missing.txt"]
    buckets = asyncio.run(classify_entries(str(tree), names))

    assert sorted(_names(buckets.directories)) == [".hidden", "docs", "music"]
    assert sorted(_names(buckets.files)) == [".env", "1.txt", "10.txt", "2.txt", "photo.jpg"]
    assert _names(buckets.failed) == ["missing.txt"]
    assert isinstance(buckets.failed[0].error, FileNotFoundError)
    total = len(buckets.directories) + len(buckets.files) + len(buckets.failed)
    assert total == len(names)


def test_classify_empty_directory(tmp_path):
    buckets = asyncio.run(classify_entries(str(tmp_path), []))
    assert (buckets.failed, buckets.directories, buckets.files) == ([], [], [])


def test_broken_symlink_is_a_failed_entry(tmp_path):
    (tmp_path / "dangling").symlink_to(tmp_path / "nowhere")
    buckets = asyncio.run(classify_entries(str(tmp_path), ["dangling"]))
    assert _names(buckets.failed) == ["dangling"]
    assert buckets.failed[0].stat_failed


def test_sort_by_name():
    entries = [DirectoryEntry(name=name) for name in ("music", "docs", "art")]
    assert _names(sort_by_name(entries)) == ["art", "docs", "music"]


def test_numeric_prefix_parsing():
    assert numeric_prefix("10.txt") == 10
    assert numeric_prefix("007-intro.mp4") == 7
    assert numeric_prefix("12abc.tar.gz") == 12
    assert numeric_prefix("notes.txt") is None
    assert numeric_prefix(".env") is None


def test_sort_by_numeric_prefix():
    entries = [DirectoryEntry(name=name) for name in ("2.txt", "10.txt", "1.txt")]
    assert _names(sort_by_numeric_prefix(entries)) == ["1.txt", "2.txt", "10.txt"]


def test_sort_by_numeric_prefix_keeps_order_of_non_numeric_names():
    entries = [DirectoryEntry(name=name) for name in ("zeta.txt", "alpha.txt")]
    assert _names(sort_by_numeric_prefix(entries)) == ["zeta.txt", "alpha.txt"]


def test_display_name_replaces_undecodable_bytes():
    entry = DirectoryEntry(name=os.fsdecode(b"bad\xff.txt"))
    assert entry.display_name == "bad�.txt"
    assert DirectoryEntry(name="café.txt").display_name == "café.txt"


def test_sort_by_name_accepts_undecodable_names():
    entries = [DirectoryEntry(name=os.fsdecode(b"z\xff")), DirectoryEntry(name="a")]
    assert _names(sort_by_name(entries))[0] == "a"


def test_has_hidden_segment():
    assert has_hidden_segment("/.hidden/")
    assert has_hidden_segment("/docs/.git/config")
    assert not has_hidden_segment("/docs/readme.md")
    assert not has_hidden_segment("/")
