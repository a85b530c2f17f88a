"""Icon catalog and stylesheet inlined into every listing page."""

from __future__ import annotations

BLANK_ICON = "_blank"
PAGE_ICON = "_page"

_ICON_GROUPS: dict[str, tuple[str, ...]] = {
    "image": ("png", "jpg", "jpeg", "gif", "svg", "bmp", "ico", "tiff", "webp", "psd"),
    "audio": ("aac", "aiff", "flac", "mid", "mp3", "ogg", "wav"),
    "video": ("avi", "flv", "mkv", "mov", "mp4", "mpg", "webm"),
    "archive": ("7z", "bz2", "dmg", "gz", "iso", "rar", "tar", "tgz", "xz", "zip"),
    "code": (
        "c", "cpp", "css", "go", "h", "hpp", "html", "java", "js", "json",
        "php", "py", "rb", "rs", "sh", "sql", "ts", "xml", "yml",
    ),
    "text": ("csv", "ics", "md", "rtf", "txt"),
    "document": ("doc", "docx", "odp", "ods", "odt", "pdf", "ppt", "pptx", "xls", "xlsx"),
}

_GROUP_GLYPHS = {
    BLANK_ICON: "\\1F4C1",
    PAGE_ICON: "\\1F4C4",
    "image": "\\1F5BC",
    "audio": "\\1F3B5",
    "video": "\\1F39E",
    "archive": "\\1F4E6",
    "code": "\\1F4DD",
    "text": "\\1F4C3",
    "document": "\\1F4D1",
}

ICONS: dict[str, str] = {
    extension: group
    for group, extensions in _ICON_GROUPS.items()
    for extension in extensions
}


def icon_class_for(extension: str) -> str | None:
    """CSS class suffix for ``extension``, or ``None`` when it is unmapped."""

    if extension in ICONS:
        return extension
    return None


def _icon_rules() -> str:
    rules = [
        f'.icon-{name}:before {{ content: "{glyph}"; }}'
        for name, glyph in _GROUP_GLYPHS.items()
        if name.startswith("_")
    ]
    for extension, group in sorted(ICONS.items()):
        rules.append(f'.icon-{extension}:before {{ content: "{_GROUP_GLYPHS[group]}"; }}')
    return "\n".join(rules)


CSS = (
    """
body {
  background: #fff;
  color: #333;
  font-family: Arial, sans-serif;
  margin: 0 1rem;
}
table { border-collapse: collapse; margin-top: 1rem; }
td { padding: 0.15rem 0.6rem; text-align: left; }
a { color: #0a5ec2; text-decoration: none; }
a:hover { text-decoration: underline; }
.perms, .file-size { color: #777; white-space: nowrap; }
.file-size { text-align: right; }
.display-name a { font-family: monospace; }
address { color: #777; font-size: 0.85rem; margin: 1rem 0; }
i.icon { display: inline-block; font-style: normal; width: 1.25rem; }
"""
    + _icon_rules()
    + "\n"
)
