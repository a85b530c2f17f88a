from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import Response

from src.api.status import CallNext, ErrorHandler, handle_status
from src.services.config import ListingConfig
from src.services.file_catalog import (
    DirectoryAccessError,
    DirectoryEntry,
    classify_entries,
    ensure_within_root,
    has_hidden_segment,
    is_within_root,
    read_directory,
    resolve_request_path,
    sort_by_name,
    sort_by_numeric_prefix,
    stat_path,
)
from src.services.formatting import compute_etag, http_date
from src.services.listing_page import render_page

logger = logging.getLogger("file_listing.show_dir")

LISTING_METHODS = {"GET", "HEAD"}


class ListingFailure(Exception):
    """A filesystem step needed for the listing failed."""

    def __init__(self, stage: str, path: str, error: OSError) -> None:
        super().__init__(f"{stage} failed for '{path}': {error}")
        self.stage = stage
        self.path = path
        self.error = error


async def _stat_or_fail(stage: str, path: str) -> os.stat_result:
    try:
        return await stat_path(path)
    except OSError as exc:
        raise ListingFailure(stage, path, exc) from exc


async def _read_or_fail(path: str) -> list[str]:
    try:
        return await read_directory(path)
    except OSError as exc:
        raise ListingFailure("read", path, exc) from exc


def wants_listing(request: Request, config: ListingConfig) -> bool:
    """True for GET/HEAD requests on a directory URL below the base path."""

    if request.method not in LISTING_METHODS:
        return False
    path = request.scope["path"]
    if not path.endswith("/"):
        return False
    if not config.show_dotfiles and has_hidden_segment(path):
        return False
    base = config.base_dir.rstrip("/")
    return path == config.base_dir or path.startswith(base + "/")


def _link_base(request: Request) -> str:
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return quote(request.scope["path"])


async def build_listing(request: Request, config: ListingConfig) -> Response:
    """Render the listing for ``request`` or raise.

    Raises :class:`DirectoryAccessError` when the path escapes the root and
    :class:`ListingFailure` when the target, its entries or its parent cannot
    be read.
    """

    pathname = request.scope["path"]
    directory = ensure_within_root(
        config.root, resolve_request_path(config.root, config.base_dir, pathname)
    )

    target = DirectoryEntry.from_stat(
        os.path.basename(directory), await _stat_or_fail("stat", directory)
    )
    names = await _read_or_fail(directory)
    if not config.show_dotfiles:
        names = [name for name in names if not name.startswith(".")]

    headers = {
        "etag": compute_etag(target, config.weak_etags),
        "last-modified": http_date(target.mtime or 0),
        "cache-control": config.cache,
    }

    buckets = await classify_entries(directory, names)
    directories = sort_by_name(buckets.directories)

    parent = os.path.dirname(directory)
    if directory != config.root and is_within_root(config.root, parent):
        parent_stat = await _stat_or_fail("parent stat", parent)
        directories.insert(0, DirectoryEntry.from_stat("..", parent_stat))

    html = render_page(
        pathname=pathname,
        link_base=_link_base(request),
        query=request.url.query,
        host=request.headers.get("host", ""),
        directories=directories,
        files=sort_by_numeric_prefix(buckets.files),
        failed=sort_by_name(buckets.failed),
        config=config,
    )
    logger.debug(
        "Listed %s: %d dirs, %d files, %d unreadable",
        directory,
        len(buckets.directories),
        len(buckets.files),
        len(buckets.failed),
    )
    return Response(content=html, status_code=200, media_type="text/html", headers=headers)


def create_show_dir(
    config: ListingConfig, on_error: ErrorHandler = handle_status
) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """Return a middleware-style ``show_dir(request, call_next)`` bound to ``config``.

    Every failure is resolved here: with ``handle_error`` an error page is
    produced through ``on_error``, otherwise the request goes on to
    ``call_next``.
    """

    async def show_dir(request: Request, call_next: CallNext) -> Response:
        error: OSError | None
        try:
            return await build_listing(request, config)
        except DirectoryAccessError as exc:
            logger.warning("Refusing to list %s: %s", request.scope["path"], exc)
            status_code, error = 403, None
        except ListingFailure as exc:
            logger.warning("Cannot list %s: %s", request.scope["path"], exc)
            status_code, error = 500, exc.error

        if config.handle_error:
            return await on_error(status_code, request, call_next, error=error)
        return await call_next(request)

    return show_dir
