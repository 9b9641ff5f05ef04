"""Jinja2 prompt templates shipped inside the package."""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined

_env = Environment(
    loader=PackageLoader("notestyle", "templates"),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render(template_name: str, **context: object) -> str:
    """Render a prompt template; a missing variable is an error."""
    return _env.get_template(template_name).render(**context).strip()
