"""
Repository URL templates.

Templates are Jinja2 expressions evaluated against the package path split on
``/``. The segments are bound as ``components`` and a ``join`` helper is
available for sub-slices, e.g.::

    https://github.com/{{ components[1] }}/{{ components[2] }}
    https://git.example.com/{{ join(components[1:3]) }}.git

Undefined names and out-of-range indexes raise instead of rendering empty.
"""

import posixpath
from typing import Iterable, Sequence

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from shared.errors import ConfigurationError, TemplateRenderError


def join_components(elems: Iterable[str]) -> str:
    """Join path elements with ``/``, ignoring empty ones, and clean the result.

    Mirrors path joining rather than URL building: ``..`` and ``.`` elements
    are resolved and duplicate slashes collapse. Joining nothing (or only
    empty strings) yields an empty string.
    """
    if isinstance(elems, str):
        raise TypeError("join expects a sequence of path elements, not a string")
    parts = [str(elem) for elem in elems if elem]
    if not parts:
        return ""
    cleaned = posixpath.normpath("/".join(parts))
    # POSIX keeps a leading "//"; path joining does not
    if cleaned.startswith("//"):
        cleaned = cleaned[1:]
    return cleaned


def _build_environment() -> Environment:
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.globals["join"] = join_components
    return env


# Environments are safe to share once configured; templates are immutable.
_environment = _build_environment()


def compile_repo_template(source: str) -> Template:
    """Compile a repository template, raising ConfigurationError when invalid."""
    try:
        return _environment.from_string(source)
    except TemplateError as e:
        raise ConfigurationError(
            "Invalid repository template",
            details={"template": source, "error": str(e)}
        ) from e


def render_repo_template(template: Template, components: Sequence[str]) -> str:
    """Evaluate a compiled template against path components."""
    try:
        return template.render(components=list(components))
    except (TemplateError, TypeError, ValueError, LookupError) as e:
        raise TemplateRenderError(
            "Unable to render repository template",
            details={"components": list(components), "error": str(e)}
        ) from e
