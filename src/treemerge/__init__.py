"""Project tree flattening utilities.

This package provides tools for merging a filtered source tree into a single,
minified text document suitable for use with Large Language Models (LLMs) or
for archival review.
"""

from importlib.metadata import PackageNotFoundError, version

# Expose the version for both programmatic use and CLI
try:
    __version__ = version("treemerge")
except PackageNotFoundError:
    __version__ = "unknown"
