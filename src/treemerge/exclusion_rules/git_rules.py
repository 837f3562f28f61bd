"""Implementation of exclusion rules using .gitignore pattern syntax."""

from os import PathLike
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from pathspec import PathSpec
from pathspec.pattern import Pattern
from pathspec.patterns import GitWildMatchPattern  # type: ignore

from treemerge.types import PathType

from .base_rules import BaseExclusionRules


class GitIgnoreExclusionRules(BaseExclusionRules):
    """Implementation of exclusion rules using .gitignore pattern syntax.

    This class uses the pathspec library to match paths relative to the merge root
    against patterns in the same way that Git does. Directories are matched with a
    trailing slash, so directory-only patterns such as ``build/`` prune the whole
    directory before it is visited.

    The rules support all standard .gitignore syntax including:
    - Basic globs (*, ?, [abc], [0-9], etc.)
    - Directory-specific patterns (ending in /)
    - Negation patterns (starting with !)
    - Double-asterisk matching (**)
    - Comment lines (starting with #)

    Rules from several files and individual patterns are combined in the order they
    are added, with later rules overriding earlier ones (particularly negations).

    Attributes:
        spec (PathSpec): Compiled pattern matcher from the pathspec library.

    Example:
        >>> from pathlib import Path
        >>> rules = GitIgnoreExclusionRules()
        >>> rules.add_rule("generated/")
        >>> rules.exclude(Path("/repo/generated"), "generated", is_dir=True)
        True
        >>> rules.add_rule("*.g.cs")
        >>> rules.exclude(Path("/repo/src/View.g.cs"), "src/View.g.cs", is_dir=False)
        True
    """

    def __init__(self, rules_files: Optional[Union[PathType, Sequence[PathType]]] = None):
        """Initialize GitIgnoreExclusionRules with patterns from specified files.

        Args:
            rules_files: Path(s) to the file(s) containing .gitignore patterns.

        Raises:
            FileNotFoundError: If any rules file does not exist.
        """
        self.spec = PathSpec.from_lines(GitWildMatchPattern, [])

        if rules_files is not None:
            self.load_rules(rules_files)

    def exclude(self, path: Path, relative_path: str, is_dir: bool) -> bool:
        """Check the entry's relative path against the loaded patterns.

        Args:
            path: Absolute path of the entry (unused by pattern matching).
            relative_path: Forward-slash separated path relative to the merge root.
            is_dir: Whether the entry is a directory.

        Returns:
            bool: True if the last pattern matching the path is not a negation.
        """
        candidate = relative_path + "/" if is_dir and not relative_path.endswith("/") else relative_path
        return bool(self.spec.match_file(candidate))

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """Load and combine .gitignore patterns from one or more files.

        Args:
            rules_files: Path(s) to file(s) containing .gitignore patterns.

        Raises:
            FileNotFoundError: If any rules file does not exist.
        """
        if isinstance(rules_files, (str, PathLike)):
            rules_files = [rules_files]

        for rules_file in rules_files:
            path = Path(rules_file)
            if not path.exists():
                raise FileNotFoundError(f"Rules file not found: {path}")

            with open(path, "r", encoding="utf-8") as f:
                gitignore_content = f.read().splitlines()

            self._extend(PathSpec.from_lines(GitWildMatchPattern, gitignore_content).patterns)

    def add_rule(self, rule: str) -> None:
        """Add a single .gitignore pattern directly.

        Args:
            rule: A single .gitignore pattern (e.g. ``"*.Designer.cs"``, ``"!keep.json"``).
        """
        self._extend([GitWildMatchPattern(rule)])

    def has_rules(self) -> bool:
        return len(self.spec.patterns) > 0

    def _extend(self, patterns: Iterable[Pattern]) -> None:
        # A new spec is compiled rather than mutating the patterns of the current one
        self.spec = PathSpec(list(self.spec.patterns) + list(patterns))
