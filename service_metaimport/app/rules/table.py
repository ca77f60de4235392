"""
Rule table construction for the metaimport resolver.
"""

from typing import Iterable, Iterator, Optional, Tuple

from shared.errors import ConfigurationError
from shared.logging import get_logger

from .models import CompiledRule
from .templating import compile_repo_template


logger = get_logger("metaimport.rule_table")


def _segment_count(path: str) -> int:
    return len(path.split("/"))


class RuleTable:
    """Immutable, ordered collection of compiled import path rules.

    Rules keep their configuration order; precedence is decided by the
    resolver, not by position. The table is built once at startup and read
    concurrently by every request without locking.
    """

    def __init__(self, rules: Iterable[CompiledRule] = ()):
        self._rules: Tuple[CompiledRule, ...] = tuple(rules)

    @classmethod
    def build(cls, paths: Iterable) -> "RuleTable":
        """Compile rule configurations into a table.

        Each entry needs ``prefix``, ``vcs``, ``repo_template`` and an
        optional ``min_components`` attribute. Any invalid entry aborts the
        whole build with a ConfigurationError.
        """
        rules = []
        for index, path in enumerate(paths):
            rules.append(cls.compile_rule(
                prefix=path.prefix,
                repo_template=path.repo_template,
                vcs=path.vcs,
                min_components=getattr(path, "min_components", None),
                index=index,
            ))

        table = cls(rules)
        logger.info("Rule table built", rules=len(table))
        return table

    @staticmethod
    def compile_rule(
        prefix: str,
        repo_template: str,
        vcs: str = "git",
        min_components: Optional[int] = None,
        index: int = 0,
    ) -> CompiledRule:
        """Validate and compile a single rule."""
        if not prefix:
            raise ConfigurationError(
                "Import path prefix must not be empty",
                details={"path": f"paths[{index}].prefix"}
            )
        if not repo_template:
            raise ConfigurationError(
                "Repository template must not be empty",
                details={"path": f"paths[{index}].repo_template", "prefix": prefix}
            )

        if not min_components or min_components <= 0:
            min_components = _segment_count(prefix)

        try:
            template = compile_repo_template(repo_template)
        except ConfigurationError as e:
            e.details.update({"path": f"paths[{index}].repo_template", "prefix": prefix})
            raise

        return CompiledRule(
            prefix=prefix,
            min_components=min_components,
            vcs=vcs,
            repo_template=repo_template,
            template=template,
        )

    def __iter__(self) -> Iterator[CompiledRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> CompiledRule:
        return self._rules[index]

    @property
    def rules(self) -> Tuple[CompiledRule, ...]:
        """All rules in configuration order."""
        return self._rules

    def get_table_stats(self):
        """Get table statistics."""
        return {
            "total_rules": len(self._rules),
            "prefixes": [rule.prefix for rule in self._rules],
            "vcs": sorted(set(rule.vcs for rule in self._rules)),
        }
