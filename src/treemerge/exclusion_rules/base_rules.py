from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence, Union

from treemerge.types import PathType


class BaseExclusionRules(ABC):
    """
    Abstract base class defining the interface for file/directory exclusion rules.

    This class serves as a contract for the rule types consulted while the project
    tree is built (name-based filter rules, .gitignore-style patterns, size limits).
    Every implementation decides for a single directory entry whether it should be
    left out of the merge. Excluded directories are pruned, so their contents are
    never visited. File loading and individual rule addition are optional
    capabilities that depend on the rule type.

    Example:
        >>> from pathlib import Path
        >>> from treemerge.exclusion_rules.git_rules import GitIgnoreExclusionRules
        >>> git_rules = GitIgnoreExclusionRules()
        >>> git_rules.add_rule('*.pyc')  # Add rule programmatically
        >>> git_rules.exclude(Path('/project/test.pyc'), 'test.pyc', is_dir=False)
        True
        >>> git_rules.exclude(Path('/project/test.py'), 'test.py', is_dir=False)
        False
    """

    @abstractmethod
    def exclude(self, path: Path, relative_path: str, is_dir: bool) -> bool:
        """
        Determine if a directory entry should be excluded.

        Args:
            path (Path): Absolute path of the entry on disk.
            relative_path (str): Path of the entry relative to the merge root, using
                forward slashes as separators regardless of platform.
            is_dir (bool): Whether the entry is a directory.

        Returns:
            bool: True if the entry should be excluded, False if it should be included.
        """
        pass

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """
        Load and parse exclusion rules from one or more files.

        Rule types that don't support file operations use this default
        implementation which raises NotImplementedError.

        Raises:
            NotImplementedError: If this rule type doesn't support loading from files.
        """
        raise NotImplementedError(f"{self.__class__.__name__} doesn't support loading rules from files.")

    def add_rule(self, rule: str) -> None:
        """
        Add a single exclusion rule directly.

        Raises:
            NotImplementedError: If this rule type doesn't support adding individual rules.
        """
        raise NotImplementedError(f"{self.__class__.__name__} doesn't support adding individual rules.")
