"""
Rule data models for the metaimport resolver.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from jinja2 import Template

from .templating import render_repo_template


@dataclass(frozen=True)
class CompiledRule:
    """Import path rule with its repository template compiled."""
    prefix: str
    min_components: int
    vcs: str
    repo_template: str
    template: Template = field(repr=False, compare=False)

    def render_repo(self, components: Sequence[str]) -> str:
        """Render the repository URL for the given path components."""
        return render_repo_template(self.template, components)

    def import_prefix(self, components: List[str]) -> str:
        """Join the leading components that form the import path root."""
        return "/".join(components[:self.min_components])


@dataclass(frozen=True)
class ResolutionResult:
    """Result of resolving a package path."""
    import_prefix: str
    vcs: str
    repo: str
