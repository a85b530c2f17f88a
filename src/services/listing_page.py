from __future__ import annotations

import os
import platform
import re
from urllib.parse import quote

from markupsafe import Markup

from src.services.config import ListingConfig
from src.services.file_catalog import DirectoryEntry
from src.services.formatting import permissions_to_string, size_to_string
from src.services.styles import BLANK_ICON, CSS, PAGE_ICON, icon_class_for
from src.services.templating import render

IMAGE_PATTERN = re.compile(r"\.(png|jpe?g|gif|svg|bmp)(\?.*)?$", re.IGNORECASE)

# Same reserved set as JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "!~*'()"


def entry_href(link_base: str, name: str) -> str:
    return f"{link_base.rstrip('/')}/{quote(os.fsencode(name), safe=_URI_COMPONENT_SAFE)}"


def icon_class(entry: DirectoryEntry) -> str:
    if entry.is_directory:
        return f"icon-{BLANK_ICON}"
    extension = entry.display_name.rsplit(".", 1)[-1]
    return f"icon-{icon_class_for(extension) or PAGE_ICON}"


def render_row(
    entry: DirectoryEntry,
    link_base: str,
    query: str,
    config: ListingConfig,
) -> Markup:
    """Render one ``<tr>`` for ``entry``.

    ``link_base`` is the raw (still percent-encoded) request path and
    ``query`` the raw query string without ``?``. Directory links keep the
    query so that navigating down preserves it.
    """

    href = entry_href(link_base, entry.name)
    display_name = entry.display_name
    if entry.is_directory:
        href += "/" + (f"?{query}" if query else "")
        display_name += "/"

    return render(
        "row.html",
        icon_class=icon_class(entry),
        show_permissions=not config.hide_permissions,
        permissions=permissions_to_string(entry),
        size=size_to_string(entry, config.human_readable, config.si),
        href=href,
        display_name=display_name,
    )


def image_hrefs(files: list[DirectoryEntry], link_base: str) -> list[str]:
    return [
        entry_href(link_base, entry.name)
        for entry in files
        if IMAGE_PATTERN.search(entry.display_name)
    ]


def render_page(
    *,
    pathname: str,
    link_base: str,
    query: str,
    host: str,
    directories: list[DirectoryEntry],
    files: list[DirectoryEntry],
    failed: list[DirectoryEntry],
    config: ListingConfig,
) -> str:
    """Assemble the listing document from already sorted buckets.

    Rows come out as directories, then files, then entries whose stat failed.
    The image preview overlay is emitted only when ``files`` holds images.
    """

    rows = [
        render_row(entry, link_base, query, config)
        for entry in (*directories, *files, *failed)
    ]
    return str(
        render(
            "listing.html",
            pathname=pathname,
            css=Markup(CSS),
            rows=rows,
            host=host,
            python_version=platform.python_version(),
            image_hrefs=image_hrefs(files, link_base),
        )
    )
