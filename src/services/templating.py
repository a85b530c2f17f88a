from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    undefined=StrictUndefined,
)


def render(template_name: str, **context: object) -> Markup:
    """Render a bundled template; plain strings in ``context`` are escaped."""

    return Markup(jinja_env.get_template(template_name).render(**context))
