"""Merge configuration."""

from dataclasses import dataclass, field

from treemerge.exclusion_rules.name_rules import FilterRules
from treemerge.minifier import MinifyOptions


@dataclass(frozen=True)
class MergeSettings:
    """Immutable configuration for a merge run.

    Settings are built once, usually from command-line arguments, and handed to the
    tree builder and the minifier explicitly.

    Attributes:
        filter_rules: Which directories and files take part.
        minify_options: Which minification stages run on each file.
        encoding: Encoding used to read source files.

    Example:
        >>> settings = MergeSettings()
        >>> settings.minify_options.remove_comments
        True
        >>> settings.filter_rules.should_exclude_directory("obj")
        True
    """

    filter_rules: FilterRules = field(default_factory=FilterRules)
    minify_options: MinifyOptions = field(default_factory=MinifyOptions)
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        try:
            "test".encode(self.encoding).decode(self.encoding)
        except LookupError as e:
            raise LookupError(f"Encoding '{self.encoding}' is not available") from e
