"""
Import path rules package.

Holds the compiled prefix rules and the resolver that picks the most
specific rule for a package path and renders its repository template.

Modules of interest:
- models: Compiled rule and resolution result records.
- templating: Jinja2 environment and the ``join`` path helper.
- table: Construction and validation of the immutable rule table.
- engine: Longest-prefix-wins resolution.
"""

from .engine import Resolver
from .models import CompiledRule, ResolutionResult
from .table import RuleTable

__all__ = ["CompiledRule", "ResolutionResult", "Resolver", "RuleTable"]
