"""Node classes for the filtered project tree."""

import os
from pathlib import Path
from typing import Optional, Tuple

from anytree import NodeMixin

from treemerge.exclusion_rules.name_rules import get_extension


class TreeNode(NodeMixin):  # type: ignore
    """Common base for directory and file nodes.

    Extends anytree.NodeMixin so nodes can be walked with anytree's iterators. A
    node's position relative to the merge root is stored as a tuple of path
    segments; it is only joined into a string when rendered.

    Attributes:
        absolute_path (Path): Absolute path of the entry on disk.
        parts (Tuple[str, ...]): Path segments relative to the merge root. Empty for the root.
    """

    def __init__(self, absolute_path: Path, parts: Tuple[str, ...], parent: Optional["DirectoryNode"] = None) -> None:
        super().__init__()
        self.absolute_path = absolute_path
        self.parts = parts
        self.parent = parent

    @property
    def name(self) -> str:
        return self.parts[-1] if self.parts else self.absolute_path.name

    @property
    def relative_path(self) -> str:
        """Path relative to the merge root, joined with the host separator (``.`` for the root)."""
        return os.sep.join(self.parts) if self.parts else "."

    @property
    def posix_path(self) -> str:
        """Path relative to the merge root, joined with forward slashes."""
        return "/".join(self.parts) if self.parts else "."

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.posix_path!r})"


class FileNode(TreeNode):
    """A file that takes part in the merge.

    Example:
        >>> from pathlib import Path
        >>> node = FileNode(Path("/repo/src/Program.cs"), ("src", "Program.cs"))
        >>> node.posix_path
        'src/Program.cs'
        >>> node.extension
        '.cs'
    """

    @property
    def extension(self) -> str:
        return get_extension(self.name)


class DirectoryNode(TreeNode):
    """A directory that survived filtering.

    Child files are attached before child directories, each group in filesystem
    enumeration order, so a pre-order walk over ``children`` visits the files of
    a directory before descending into its subdirectories.

    Example:
        >>> from pathlib import Path
        >>> root = DirectoryNode(Path("/repo"), ())
        >>> _ = FileNode(Path("/repo/a.cs"), ("a.cs",), parent=root)
        >>> sub = DirectoryNode(Path("/repo/src"), ("src",), parent=root)
        >>> root.relative_path
        '.'
        >>> [f.name for f in root.files], [d.name for d in root.subdirectories]
        (['a.cs'], ['src'])
    """

    @property
    def files(self) -> Tuple[FileNode, ...]:
        return tuple(child for child in self.children if isinstance(child, FileNode))

    @property
    def subdirectories(self) -> Tuple["DirectoryNode", ...]:
        return tuple(child for child in self.children if isinstance(child, DirectoryNode))
