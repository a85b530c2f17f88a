from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "FILE_LISTING_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_BOOL_FIELDS = (
    "show_dotfiles",
    "hide_permissions",
    "human_readable",
    "si",
    "weak_etags",
    "handle_error",
)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def _normalize_cache(raw: str) -> str:
    trimmed = raw.strip()
    if trimmed.isdigit():
        return f"max-age={trimmed}"
    return trimmed


@dataclass(frozen=True)
class ListingConfig:
    """Settings shared by every directory listing request.

    Built once when the application is created and never mutated afterwards.
    """

    root: str = "."
    base_dir: str = "/"
    cache: str = "max-age=3600"
    show_dotfiles: bool = True
    hide_permissions: bool = False
    human_readable: bool = True
    si: bool = False
    weak_etags: bool = True
    handle_error: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", os.path.normpath(os.path.abspath(self.root)))
        base = "/" + self.base_dir.strip("/")
        object.__setattr__(self, "base_dir", base)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ListingConfig:
        """Read ``FILE_LISTING_*`` variables, falling back to the defaults."""

        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        root = env.get(ENV_PREFIX + "ROOT")
        if root:
            kwargs["root"] = root
        base_dir = env.get(ENV_PREFIX + "BASE_DIR")
        if base_dir:
            kwargs["base_dir"] = base_dir
        cache = env.get(ENV_PREFIX + "CACHE")
        if cache:
            kwargs["cache"] = _normalize_cache(cache)

        for name in _BOOL_FIELDS:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is not None and raw.strip():
                kwargs[name] = _parse_bool(name.upper(), raw)

        return cls(**kwargs)
