"""Command-line argument parsing for treemerge.

This module defines the command-line interface for treemerge and turns the
parsed arguments into the immutable merge configuration.
"""

import argparse
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence, Type, Union

from treemerge import __version__
from treemerge.exclusion_rules.base_rules import BaseExclusionRules
from treemerge.exclusion_rules.name_rules import FilterRules
from treemerge.minifier import MinifyOptions
from treemerge.settings import MergeSettings


def create_exclusion_action(exclusion_rules: BaseExclusionRules) -> Type[argparse.Action]:
    """Create a custom action class for handling gitignore-style exclusions.

    The returned action updates the provided rules object while arguments are
    parsed, so ``-e`` files and ``-i`` patterns apply in command-line order.

    Args:
        exclusion_rules: The exclusion rules object to update during parsing.

    Returns:
        A custom action class for use with argparse.
    """

    class ExclusionRulesAction(argparse.Action):
        """Adds rule files (-e) or single patterns (-i) to the exclusion rules."""

        def __init__(self, option_strings: List[str], dest: str, **kwargs: Any) -> None:
            super().__init__(option_strings, dest, **kwargs)

        def __call__(
            self,
            parser: argparse.ArgumentParser,
            namespace: argparse.Namespace,
            values: Union[str, Sequence[Any], None],
            option_string: Optional[str] = None,
        ) -> None:
            if values is None:
                return

            if option_string in ("-e", "--exclude"):
                if isinstance(values, (str, os.PathLike)):
                    exclusion_rules.load_rules(values)
                else:
                    exclusion_rules.load_rules(Path(str(values)))
            else:  # -i/--ignore
                exclusion_rules.add_rule(str(values))

            recorded = getattr(namespace, self.dest, None) or []
            setattr(namespace, self.dest, recorded + [values])

    return ExclusionRulesAction


def create_parser(exclusion_rules: BaseExclusionRules) -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Args:
        exclusion_rules: The gitignore-style rules object to update during parsing.

    Returns:
        An ArgumentParser instance configured with treemerge's options.
    """
    description = """
    treemerge: merge a project's source files into one compact text document.

    The project directory is walked, directories and files are filtered by name
    and extension, and every remaining file is minified (comments, blank lines,
    indentation and redundant whitespace removed) and written between
    "FILE: <relative path>" and "====" marker lines. The result is a single
    snapshot of a codebase, suited to LLM context windows or archival review.

    Default filters:
      excluded directories  bin obj Locale deb Driver wwwroot Linux Windows
                            Migrations integrations legacy
      excluded substrings   .Tests
      excluded extensions   .dll .po
      included extensions   .cs .razor .cshtml .json .props .yml
      dot files             ignored
    """

    epilog = """
    Examples:
      # Merge a project into merged_projects/<name>_<timestamp>.txt
      treemerge /path/to/project

      # Write to a chosen file, or to stdout
      treemerge -o snapshot.txt /path/to/project
      treemerge -o - /path/to/project | less

      # Merge TypeScript sources instead of the default .NET set
      treemerge --include-ext .ts --include-ext .tsx /path/to/project

      # Keep everything except the default exclusions
      treemerge --all-extensions /path/to/project

      # Extra gitignore-style exclusions, from files or single patterns
      treemerge -e .gitignore -i "*.Designer.cs" -i "!Keep.Designer.cs" /path/to/project

      # Skip large files and report token usage
      treemerge --max-file-size 200KB -t gpt-4o -s stderr /path/to/project

      # Copy files verbatim
      treemerge --no-minify /path/to/project
    """

    parser = argparse.ArgumentParser(
        prog="treemerge",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version", action="version", version=f"treemerge {__version__}", help="Show the version and exit"
    )

    ExclusionAction = create_exclusion_action(exclusion_rules)

    parser.add_argument(
        "directory",
        type=Path,
        help="The project directory to merge. All paths in the output are relative to it.",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="FILE",
        help="Output file path, or '-' for stdout. Overrides -d/--output-dir.",
    )
    output.add_argument(
        "-d",
        "--output-dir",
        type=Path,
        metavar="DIR",
        help="Directory for the timestamped output file (default: merged_projects).",
    )
    output.add_argument(
        "-s",
        "--summary",
        metavar="DEST",
        choices=["stderr", "stdout", "file"],
        help="Print summary report. Valid destinations: stderr, stdout, file (requires a file output)",
    )
    output.add_argument(
        "-t",
        "--tokenizer",
        metavar="MODEL",
        help="Tokenizer model to use for counting tokens (e.g., gpt-4o). Specifying this enables token counting.",
    )
    output.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print progress messages to stderr.",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        metavar="NAME",
        help="Exclude directories with this name, case-insensitively (added to the defaults).",
    )
    filters.add_argument(
        "--exclude-dir-substring",
        action="append",
        default=[],
        metavar="TEXT",
        help="Exclude directories whose name contains TEXT, case-insensitively (added to the defaults).",
    )
    filters.add_argument(
        "--exclude-ext",
        action="append",
        default=[],
        metavar="EXT",
        help="Exclude files with this extension (added to the defaults).",
    )
    filters.add_argument(
        "--include-ext",
        action="append",
        default=None,
        metavar="EXT",
        help="Only include files with this extension. Replaces the default allow-list; repeatable.",
    )
    filters.add_argument(
        "--all-extensions",
        action="store_true",
        help="Include files with any extension, or none (empties the allow-list).",
    )
    filters.add_argument(
        "--include-dot-files",
        action="store_true",
        help="Include files and directories whose names start with a dot.",
    )
    filters.add_argument(
        "-e",
        "--exclude",
        type=Path,
        metavar="FILE",
        action=ExclusionAction,
        help="Path to a gitignore-style exclusion file (can be specified multiple times).",
    )
    filters.add_argument(
        "-i",
        "--ignore",
        type=str,
        metavar="PATTERN",
        action=ExclusionAction,
        help=(
            "Individual gitignore-style pattern to exclude files and directories. Patterns are "
            "processed in the order they appear, mixed with -e/--exclude options."
        ),
    )
    filters.add_argument(
        "--max-file-size",
        metavar="SIZE",
        help="Skip files larger than SIZE (e.g. 500KB, 2MiB, 1048576).",
    )
    filters.add_argument(
        "-L",
        "--follow-symlinks",
        action="store_true",
        help="Descend into symbolically linked directories.",
    )

    minify = parser.add_argument_group("minification")
    minify.add_argument("--keep-comments", action="store_true", help="Do not strip comments.")
    minify.add_argument("--keep-empty-lines", action="store_true", help="Do not remove blank lines.")
    minify.add_argument("--keep-indentation", action="store_true", help="Do not strip leading whitespace.")
    minify.add_argument("--keep-whitespace", action="store_true", help="Do not compress whitespace.")
    minify.add_argument("--no-minify", action="store_true", help="Copy file contents unchanged.")

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Performs additional validation beyond what argparse can handle.

    Raises:
        ValueError: If any arguments fail validation.
    """
    writes_to_stdout = args.output is not None and str(args.output) == "-"
    if args.summary == "file" and writes_to_stdout:
        raise ValueError("--summary=file requires a file output, not stdout")
    if args.all_extensions and args.include_ext:
        raise ValueError("--all-extensions cannot be combined with --include-ext")


def build_filter_rules(args: argparse.Namespace) -> FilterRules:
    """Combine the default filter rules with the filter options."""
    defaults = FilterRules()

    if args.all_extensions:
        included: Sequence[str] = ()
    elif args.include_ext:
        included = args.include_ext
    else:
        included = defaults.included_extensions

    return FilterRules(
        excluded_directories=defaults.excluded_directories + tuple(args.exclude_dir),
        excluded_directory_substrings=defaults.excluded_directory_substrings + tuple(args.exclude_dir_substring),
        excluded_extensions=defaults.excluded_extensions + tuple(args.exclude_ext),
        included_extensions=tuple(included),
        ignore_dot_files=not args.include_dot_files,
    )


def build_minify_options(args: argparse.Namespace) -> MinifyOptions:
    if args.no_minify:
        return MinifyOptions.disabled()
    return MinifyOptions(
        remove_comments=not args.keep_comments,
        remove_empty_lines=not args.keep_empty_lines,
        remove_indentation=not args.keep_indentation,
        compress_whitespace=not args.keep_whitespace,
    )


def build_settings(args: argparse.Namespace) -> MergeSettings:
    """Build the merge configuration from parsed arguments."""
    return MergeSettings(filter_rules=build_filter_rules(args), minify_options=build_minify_options(args))
