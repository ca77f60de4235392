"""
Import path resolution engine.
"""

from typing import Optional

from shared.logging import get_logger

from .models import CompiledRule, ResolutionResult
from .table import RuleTable


class Resolver:
    """Longest-prefix-wins resolver over a rule table."""

    def __init__(self, table: RuleTable):
        self.logger = get_logger("metaimport.resolver")
        self.table = table

    def match(self, package_path: str) -> Optional[CompiledRule]:
        """Select the rule for a package path, or None.

        A rule is a candidate when the path starts with its prefix and splits
        into at least ``min_components`` segments. The longest candidate
        prefix wins; among candidates of equal length the last declared one
        wins.
        """
        length = len(package_path.split("/"))
        best: Optional[CompiledRule] = None
        best_length = 0

        for rule in self.table:
            if rule.min_components > length:
                continue
            if not package_path.startswith(rule.prefix):
                continue
            # ">=" keeps the last declared rule on ties
            if len(rule.prefix) >= best_length:
                best = rule
                best_length = len(rule.prefix)

        return best

    def resolve(self, package_path: str) -> Optional[ResolutionResult]:
        """Resolve a package path into its go-import values.

        Returns None when no rule matches. Raises TemplateRenderError when
        the matched rule's template cannot be evaluated for this path.
        """
        rule = self.match(package_path)
        if rule is None:
            return None

        components = package_path.split("/")
        repo = rule.render_repo(components)

        result = ResolutionResult(
            import_prefix=rule.import_prefix(components),
            vcs=rule.vcs,
            repo=repo,
        )

        self.logger.debug(
            "Package resolved",
            package=package_path,
            prefix=rule.prefix,
            import_prefix=result.import_prefix,
            repo=result.repo,
        )

        return result
