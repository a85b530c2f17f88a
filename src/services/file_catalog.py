from __future__ import annotations

import asyncio
import locale
import os
import posixpath
import re
import stat as stat_module
from dataclasses import dataclass, field
from functools import cmp_to_key

from starlette.concurrency import run_in_threadpool

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class DirectoryEntry:
    """Metadata describing one name inside a listed directory.

    Entries whose stat failed keep the error and carry no metadata.
    """

    name: str
    is_directory: bool = False
    size: int | None = None
    mtime: float | None = None
    mode: int | None = None
    inode: int | None = None
    error: OSError | None = None

    @classmethod
    def from_stat(cls, name: str, result: os.stat_result) -> DirectoryEntry:
        return cls(
            name=name,
            is_directory=stat_module.S_ISDIR(result.st_mode),
            size=result.st_size,
            mtime=result.st_mtime,
            mode=result.st_mode,
            inode=result.st_ino,
        )

    @classmethod
    def failed(cls, name: str, error: OSError) -> DirectoryEntry:
        return cls(name=name, error=error)

    @property
    def display_name(self) -> str:
        """The name as text; undecodable filesystem bytes become U+FFFD."""

        return os.fsencode(self.name).decode("utf-8", "replace")

    @property
    def stat_failed(self) -> bool:
        return self.error is not None


@dataclass
class EntryBuckets:
    failed: list[DirectoryEntry] = field(default_factory=list)
    directories: list[DirectoryEntry] = field(default_factory=list)
    files: list[DirectoryEntry] = field(default_factory=list)


class DirectoryAccessError(FileNotFoundError):
    """Raised when the requested path is outside the listing root."""


def resolve_request_path(root: str, base_dir: str, pathname: str) -> str:
    """Map a decoded request path onto the filesystem below ``root``.

    The base prefix is stripped, the remainder joined onto ``root`` and the
    result normalised. Symlinks are not resolved and the result is not
    checked against ``root``; see :func:`ensure_within_root`.
    """

    relative = posixpath.relpath(pathname or "/", posixpath.join("/", base_dir))
    return os.path.normpath(os.path.join(root, relative))


def is_within_root(root: str, target: str) -> bool:
    root = os.path.normpath(root)
    target = os.path.normpath(target)
    if target == root:
        return True
    return target.startswith(root.rstrip(os.sep) + os.sep)


def ensure_within_root(root: str, target: str) -> str:
    if not is_within_root(root, target):
        raise DirectoryAccessError(f"Path '{target}' escapes listing root {root}")
    return target


def has_hidden_segment(pathname: str) -> bool:
    """True when any segment of the URL path starts with a dot."""

    return any(segment.startswith(".") for segment in pathname.split("/"))


async def stat_path(path: str) -> os.stat_result:
    return await run_in_threadpool(os.stat, path)


async def read_directory(path: str) -> list[str]:
    return await run_in_threadpool(os.listdir, path)


async def _stat_entry(directory: str, name: str) -> DirectoryEntry:
    try:
        result = await stat_path(os.path.join(directory, name))
    except OSError as exc:
        return DirectoryEntry.failed(name, exc)
    return DirectoryEntry.from_stat(name, result)


async def classify_entries(directory: str, names: list[str]) -> EntryBuckets:
    """Stat every name in ``directory`` and split them into three buckets.

    Per-entry stat failures land in ``failed``; nothing is raised. Bucket
    order follows the order of ``names``.
    """

    buckets = EntryBuckets()
    entries = await asyncio.gather(*(_stat_entry(directory, name) for name in names))
    for entry in entries:
        if entry.stat_failed:
            buckets.failed.append(entry)
        elif entry.is_directory:
            buckets.directories.append(entry)
        else:
            buckets.files.append(entry)
    return buckets


def sort_by_name(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Return ``entries`` in locale-aware order of their names."""

    return sorted(entries, key=lambda entry: locale.strxfrm(entry.display_name))


def numeric_prefix(name: str) -> int | None:
    """Integer parsed from the leading digits of the part before the first dot."""

    match = _LEADING_INT.match(name.split(".", 1)[0])
    if match is None:
        return None
    return int(match.group(1))


def _compare_numeric_prefix(a: DirectoryEntry, b: DirectoryEntry) -> int:
    va = numeric_prefix(a.name)
    vb = numeric_prefix(b.name)
    # Names without a numeric prefix compare equal to everything.
    if va is None or vb is None:
        return 0
    return (va > vb) - (va < vb)


def sort_by_numeric_prefix(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Order files by their numeric name prefix, so ``2.txt`` precedes ``10.txt``."""

    return sorted(entries, key=cmp_to_key(_compare_numeric_prefix))
