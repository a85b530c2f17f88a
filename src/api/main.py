from __future__ import annotations

import logging
import os
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, RedirectResponse, Response

from src.api.show_dir import create_show_dir, wants_listing
from src.services.config import ListingConfig
from src.services.file_catalog import (
    DirectoryAccessError,
    ensure_within_root,
    has_hidden_segment,
    resolve_request_path,
)

logger = logging.getLogger("file_listing")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s - %(message)s"))
    logger.addHandler(handler)


def _resolve_file(config: ListingConfig, pathname: str) -> str:
    try:
        return ensure_within_root(
            config.root, resolve_request_path(config.root, config.base_dir, pathname)
        )
    except DirectoryAccessError as exc:
        raise HTTPException(status_code=404, detail="Not found") from exc


def create_app(config: ListingConfig | None = None) -> FastAPI:
    """Build the file listing application around ``config``.

    Directory URLs (ending in ``/``) under the base path are answered by the
    listing middleware; everything else reaches the file route.
    """

    if config is None:
        config = ListingConfig.from_env()

    logger.info(
        "Serving %s under %s (dotfiles %s, errors %s)",
        config.root,
        config.base_dir,
        "shown" if config.show_dotfiles else "hidden",
        "handled" if config.handle_error else "passed on",
    )

    app = FastAPI(
        title="File Listing Service",
        description="Static file server with browsable HTML directory indexes.",
        version="0.1.0",
        # Every path is a served path; no schema or docs routes.
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.listing_config = config
    show_dir = create_show_dir(config)

    @app.middleware("http")
    async def directory_listing(request: Request, call_next):
        if not wants_listing(request, config):
            return await call_next(request)
        return await show_dir(request, call_next)

    @app.middleware("http")
    async def add_csp_header(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; style-src 'self' 'unsafe-inline'; "
            "script-src 'self' 'unsafe-inline';",
        )
        return response

    async def serve_file(request: Request) -> Response:
        pathname = request.scope["path"]
        target = _resolve_file(config, pathname)

        # Directory URLs that reach this route were declined by the listing.
        if pathname.endswith("/"):
            raise HTTPException(status_code=404, detail="Not found")
        if not config.show_dotfiles and has_hidden_segment(pathname):
            raise HTTPException(status_code=404, detail="Not found")

        if os.path.isdir(target):
            location = quote(pathname) + "/"
            if request.url.query:
                location += "?" + request.url.query
            return RedirectResponse(url=location, status_code=302)

        if not os.path.isfile(target):
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(path=target, headers={"cache-control": config.cache})

    route_base = config.base_dir.rstrip("/")
    app.add_api_route(
        f"{route_base}/{{file_path:path}}",
        serve_file,
        methods=["GET", "HEAD"],
        include_in_schema=False,
    )

    return app


app = create_app()
