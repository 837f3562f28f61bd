"""Composite exclusion rules for combining multiple rule types."""

from pathlib import Path
from typing import List, Sequence

from .base_rules import BaseExclusionRules


class CompositeExclusionRules(BaseExclusionRules):
    """Composite exclusion rules that combine multiple rule types.

    An entry is excluded if ANY of the constituent rules excludes it. Rules are
    evaluated in the order provided and evaluation stops at the first match.

    Attributes:
        rules (List[BaseExclusionRules]): List of constituent exclusion rules.

    Example:
        >>> from pathlib import Path
        >>> from treemerge.exclusion_rules.git_rules import GitIgnoreExclusionRules
        >>> from treemerge.exclusion_rules.size_rules import SizeExclusionRules
        >>> patterns = GitIgnoreExclusionRules()
        >>> patterns.add_rule("*.min.js")
        >>> composite = CompositeExclusionRules([patterns, SizeExclusionRules("1MB")])
        >>> composite.exclude(Path("/repo/app.min.js"), "app.min.js", is_dir=False)
        True
    """

    def __init__(self, rules: Sequence[BaseExclusionRules]):
        """Initialize composite exclusion rules.

        Args:
            rules: Sequence of exclusion rules to combine.

        Raises:
            ValueError: If rules list is empty.
            TypeError: If any rule doesn't implement BaseExclusionRules.
        """
        if not rules:
            raise ValueError("At least one exclusion rule must be provided")

        for i, rule in enumerate(rules):
            if not isinstance(rule, BaseExclusionRules):
                raise TypeError(f"Rule at index {i} must implement BaseExclusionRules, got {type(rule)}")

        self.rules: List[BaseExclusionRules] = list(rules)

    def exclude(self, path: Path, relative_path: str, is_dir: bool) -> bool:
        return any(rule.exclude(path, relative_path, is_dir) for rule in self.rules)
