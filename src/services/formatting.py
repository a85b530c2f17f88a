from __future__ import annotations

from datetime import datetime, timezone
from email.utils import formatdate

from src.services.file_catalog import DirectoryEntry

_PERMISSION_TRIPLETS = ("---", "--x", "-w-", "-wx", "r--", "r-x", "rw-", "rwx")
_SIZE_UNITS = ("k", "M", "G", "T", "P", "E", "Z", "Y")
UNKNOWN_PERMISSIONS = "???!!!???"
UNKNOWN_SIZE = "??"


def permissions_to_string(entry: DirectoryEntry) -> str:
    """Render mode bits as ``drwxr-xr-x``."""

    if entry.mode is None:
        return UNKNOWN_PERMISSIONS
    kind = "d" if entry.is_directory else "-"
    bits = entry.mode & 0o777
    return kind + "".join(
        _PERMISSION_TRIPLETS[(bits >> shift) & 0o7] for shift in (6, 3, 0)
    )


def size_to_string(entry: DirectoryEntry, human_readable: bool, si: bool) -> str:
    if entry.is_directory:
        return ""
    if entry.size is None:
        return UNKNOWN_SIZE

    size = entry.size
    threshold = 1000 if si else 1024
    if not human_readable or size < threshold:
        return f"{size}B"

    value = float(size)
    unit = -1
    while True:
        value /= threshold
        unit += 1
        if value < threshold or unit == len(_SIZE_UNITS) - 1:
            break
    return f"{value:.1f}{_SIZE_UNITS[unit]}"


def compute_etag(entry: DirectoryEntry, weak: bool) -> str:
    """Entity tag built from inode, size and modification time."""

    mtime = datetime.fromtimestamp(entry.mtime or 0, tz=timezone.utc)
    stamp = mtime.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    tag = f'"{entry.inode or 0}-{entry.size or 0}-{stamp}"'
    if weak:
        return f"W/{tag}"
    return tag


def http_date(timestamp: float) -> str:
    return formatdate(timestamp, usegmt=True)
