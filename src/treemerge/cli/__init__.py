"""Command-line interface for treemerge."""
