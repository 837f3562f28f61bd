"""Filtered tree construction for project merging.

This module walks a project directory and builds an in-memory tree of the
directories and files that pass the configured exclusion rules. Excluded
directories are pruned before recursion, so nothing inside them is ever
visited, counted or read.
"""

import os
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from anytree import PreOrderIter

from treemerge.exceptions import InvalidRootError, TraversalError
from treemerge.exclusion_rules.base_rules import BaseExclusionRules
from treemerge.exclusion_rules.name_rules import FilterRules
from treemerge.tree.nodes import DirectoryNode, FileNode
from treemerge.types import PathType

# (st_dev, st_ino) pairs identifying directories on the current descent path
_DirectoryId = Tuple[int, int]


class TreeBuilder:
    """Builds a filtered DirectoryNode tree for a project root.

    Every directory is enumerated exactly once. Its files are filtered and
    attached first, then its subdirectories are filtered and built recursively,
    both in filesystem enumeration order (entries are not sorted).

    Symbolic Link Behavior:
        Symlinks to files are treated as files. Symlinks to directories are skipped
        unless follow_symlinks is True; when followed, a directory already present
        on the current descent path is skipped to break loops.

    Error Handling:
        Any failure to enumerate a directory raises TraversalError and aborts the
        whole build. There is no partial tree and no retry.

    Attributes:
        filter_rules (FilterRules): Name-based inclusion policy.
        extra_rules (Optional[BaseExclusionRules]): Additional rules consulted after
            the name-based policy (patterns, size limits).
        follow_symlinks (bool): Whether to descend into symlinked directories.

    Example:
        >>> builder = TreeBuilder(FilterRules())  # doctest: +SKIP
        >>> root = builder.build("path/to/project")  # doctest: +SKIP
        >>> count_files(root)  # doctest: +SKIP
        42
    """

    def __init__(
        self,
        filter_rules: Optional[FilterRules] = None,
        extra_rules: Optional[BaseExclusionRules] = None,
        follow_symlinks: bool = False,
    ) -> None:
        self.filter_rules = filter_rules if filter_rules is not None else FilterRules()
        self.extra_rules = extra_rules
        self.follow_symlinks = follow_symlinks

    def build(self, root_path: PathType) -> DirectoryNode:
        """Build the tree for root_path.

        Args:
            root_path: The project directory. Relative paths are resolved against
                the current working directory.

        Returns:
            The root DirectoryNode (relative path ``.``).

        Raises:
            InvalidRootError: If root_path does not exist or is not a directory.
            TraversalError: If any directory in the tree cannot be enumerated.
        """
        root = Path(root_path)
        if not root.exists():
            raise InvalidRootError(str(root_path), "does not exist")
        if not root.is_dir():
            raise InvalidRootError(str(root_path), "is not a directory")

        root_node = DirectoryNode(Path(os.path.abspath(root)), ())
        visited: Set[_DirectoryId] = set()
        self._populate(root_node, visited)
        return root_node

    def _directory_id(self, path: Path) -> Optional[_DirectoryId]:
        try:
            stat_info = path.stat()
        except OSError:
            return None
        return (stat_info.st_dev, stat_info.st_ino)

    def _is_excluded(self, path: Path, parts: Tuple[str, ...], is_dir: bool) -> bool:
        name = parts[-1]
        if is_dir:
            if self.filter_rules.should_exclude_directory(name):
                return True
        elif self.filter_rules.should_exclude_file(name):
            return True

        if self.extra_rules is not None:
            return self.extra_rules.exclude(path, "/".join(parts), is_dir)
        return False

    def _scan(self, directory: Path) -> Tuple[List[os.DirEntry], List[os.DirEntry]]:
        """Enumerate a directory once, splitting entries into files and subdirectories."""
        files: List[os.DirEntry] = []
        subdirectories: List[os.DirEntry] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.is_dir():
                        if entry.is_symlink() and not self.follow_symlinks:
                            continue
                        subdirectories.append(entry)
                    elif entry.is_file():
                        files.append(entry)
        except OSError as e:
            raise TraversalError(str(directory), e) from e
        return files, subdirectories

    def _populate(self, node: DirectoryNode, visited: Set[_DirectoryId]) -> None:
        directory_id = self._directory_id(node.absolute_path) if self.follow_symlinks else None
        if directory_id is not None:
            visited.add(directory_id)

        files, subdirectories = self._scan(node.absolute_path)

        for entry in files:
            path = Path(entry.path)
            parts = node.parts + (entry.name,)
            if not self._is_excluded(path, parts, is_dir=False):
                FileNode(path, parts, parent=node)

        for entry in subdirectories:
            path = Path(entry.path)
            parts = node.parts + (entry.name,)
            if self._is_excluded(path, parts, is_dir=True):
                continue
            if self.follow_symlinks and self._directory_id(path) in visited:
                continue

            child = DirectoryNode(path, parts)
            self._populate(child, visited)
            child.parent = node

        if directory_id is not None:
            visited.discard(directory_id)


def build_tree(
    root_path: PathType,
    filter_rules: Optional[FilterRules] = None,
    extra_rules: Optional[BaseExclusionRules] = None,
    follow_symlinks: bool = False,
) -> DirectoryNode:
    """Build a filtered tree for root_path. See TreeBuilder.build."""
    return TreeBuilder(filter_rules, extra_rules, follow_symlinks).build(root_path)


def count_files(node: DirectoryNode) -> int:
    """Count the files in the subtree rooted at node."""
    return len(node.files) + sum(count_files(subdirectory) for subdirectory in node.subdirectories)


def count_directories(node: DirectoryNode) -> int:
    """Count the directories below node, not counting node itself."""
    return sum(1 + count_directories(subdirectory) for subdirectory in node.subdirectories)


def iterate_files(node: DirectoryNode) -> Iterator[FileNode]:
    """Yield files in merge order.

    The walk is pre-order with the files of each directory yielded before any of
    its subdirectories are entered.
    """
    for child in PreOrderIter(node, filter_=lambda n: isinstance(n, FileNode)):
        yield child
