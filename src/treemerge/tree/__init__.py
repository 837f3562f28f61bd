"""Filtered project tree.

This package provides the node classes mirroring the filtered subset of a project
directory and the builder that walks the filesystem to create them.
"""

from .nodes import DirectoryNode, FileNode
from .tree_builder import TreeBuilder, build_tree, count_directories, count_files, iterate_files

__all__ = [
    "DirectoryNode",
    "FileNode",
    "TreeBuilder",
    "build_tree",
    "count_directories",
    "count_files",
    "iterate_files",
]
