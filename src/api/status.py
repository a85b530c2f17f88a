from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import HTMLResponse, Response

from src.services.templating import render

CallNext = Callable[[Request], Awaitable[Response]]
ErrorHandler = Callable[..., Awaitable[Response]]

logger = logging.getLogger("file_listing.status")


async def handle_status(
    status_code: int,
    request: Request,
    call_next: CallNext,
    error: BaseException | None = None,
) -> Response:
    """Answer ``request`` with an HTML error page for ``status_code``.

    ``call_next`` is accepted so that replacement handlers can defer to the
    rest of the application instead.
    """

    reason = HTTPStatus(status_code).phrase
    # Filesystem errors may carry undecodable path bytes.
    detail = str(error).encode("utf-8", "replace").decode() if error is not None else ""
    if status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, status_code, detail)
    else:
        logger.info("%s %s -> %s", request.method, request.url.path, status_code)

    body = render("status.html", status_code=status_code, reason=reason, detail=detail)
    return HTMLResponse(content=str(body), status_code=status_code)
