"""
go-import HTML page rendering.
"""

from jinja2 import Environment, StrictUndefined, TemplateError

from shared.errors import ServiceError

from .rules.models import ResolutionResult


GO_IMPORT_PAGE = """
<html>
  <head>
    <meta name="go-import" content="{{ import_prefix }} {{ vcs }} {{ repo }}">
  </head>
  <body>
  </body>
</html>
"""

_page_template = Environment(
    undefined=StrictUndefined,
    autoescape=True,
    keep_trailing_newline=True,
).from_string(GO_IMPORT_PAGE)


def render_go_import_page(result: ResolutionResult) -> str:
    """Render the HTML page announcing a package's VCS and repository."""
    try:
        return _page_template.render(
            import_prefix=result.import_prefix,
            vcs=result.vcs,
            repo=result.repo,
        )
    except TemplateError as e:
        raise ServiceError("Unable to render go-import page", details={"error": str(e)}) from e
