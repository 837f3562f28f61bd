"""Command-line interface for treemerge.

This module wires argument parsing, the merge and the output writer together.
All diagnostics go to stderr as ``Error: ...`` or ``Warning: ...`` lines.

Exit Codes:
    0: Successful completion
    1: Runtime error during execution (invalid root, unreadable output, ...)
    2: Command-line syntax error
    126: Permission denied while walking the project tree
    130: Interrupted by SIGINT (Ctrl+C)
    141: Broken pipe (SIGPIPE) on Unix-like systems

Example:
    # Merge a project into merged_projects/<name>_<timestamp>.txt
    $ treemerge /path/to/project

    # Print the merged document and a summary
    $ treemerge -o - -s stderr /path/to/project
"""

import sys
from collections.abc import Mapping
from datetime import datetime
from typing import List, Optional, Sequence

from humanfriendly import format_size

from treemerge.cli.argparser import build_settings, create_parser, validate_args
from treemerge.cli.output_path import resolve_output
from treemerge.cli.safe_writer import SafeWriter
from treemerge.cli.signal_handler import setup_signal_handling, signal_handler
from treemerge.exceptions import InvalidRootError, TokenizerNotAvailableError, TraversalError
from treemerge.exclusion_rules.base_rules import BaseExclusionRules
from treemerge.exclusion_rules.composite_rules import CompositeExclusionRules
from treemerge.exclusion_rules.git_rules import GitIgnoreExclusionRules
from treemerge.exclusion_rules.size_rules import SizeExclusionRules
from treemerge.merger import StreamingProjectMerger
from treemerge.token_counter import tiktoken_available

EXIT_ERROR = 1
EXIT_PERMISSION_DENIED = 126


def format_counts(counts: Mapping[str, Optional[int]]) -> str:
    """Format the counts into a human-readable string.

    Example:
        >>> print(format_counts({"directories": 2, "files": 5, "read_errors": 0,
        ...                      "lines": 40, "tokens": None, "characters": 900}))
        Directories: 2
        Files: 5
        Read errors: 0
        Lines: 40
        Characters: 900
    """
    result = [
        f"Directories: {counts['directories']}",
        f"Files: {counts['files']}",
        f"Read errors: {counts['read_errors']}",
        f"Lines: {counts['lines']}",
        f"Characters: {counts['characters']}",
    ]

    if counts["tokens"] is not None:
        result.insert(4, f"Tokens: {counts['tokens']}")

    return "\n".join(result)


def build_extra_rules(
    pattern_rules: GitIgnoreExclusionRules, max_file_size: Optional[str]
) -> Optional[BaseExclusionRules]:
    """Combine the gitignore-style rules and the size limit, leaving out unused ones."""
    rules: List[BaseExclusionRules] = []
    if pattern_rules.has_rules():
        rules.append(pattern_rules)
    if max_file_size is not None:
        rules.append(SizeExclusionRules(max_file_size))
    if not rules:
        return None
    if len(rules) == 1:
        return rules[0]
    return CompositeExclusionRules(rules)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the treemerge command-line interface.

    Args:
        argv: Arguments to parse instead of ``sys.argv[1:]``.
    """
    setup_signal_handling()

    try:
        # Populated by -e/-i while parsing, in command-line order
        pattern_rules = GitIgnoreExclusionRules()

        parser = create_parser(pattern_rules)
        args = parser.parse_args(argv)

        validate_args(args)

        if args.tokenizer and not tiktoken_available():
            raise TokenizerNotAvailableError(
                "Token counting was requested with -t/--tokenizer, but the required tiktoken library is not installed."
            )

        settings = build_settings(args)
        extra_rules = build_extra_rules(pattern_rules, args.max_file_size)

        # The whole tree is built here, before any output is opened
        merger = StreamingProjectMerger(
            args.directory,
            settings=settings,
            extra_rules=extra_rules,
            tokenizer_model=args.tokenizer,
            follow_symlinks=args.follow_symlinks,
        )

        if not args.quiet:
            print(f"Found {merger.file_count} files to merge.", file=sys.stderr)

        output = resolve_output(args.output, args.output_dir, merger.project_name, datetime.now())

        with SafeWriter(output if output is not None else sys.stdout.fileno()) as safe_writer:
            try:
                for chunk in merger.stream():
                    safe_writer.write(chunk)

                if args.summary:
                    count_output_str = format_counts(
                        {
                            "directories": merger.directory_count,
                            "files": merger.file_count,
                            "read_errors": merger.read_error_count,
                            "lines": merger.line_count,
                            "tokens": merger.token_count,
                            "characters": merger.character_count,
                        }
                    )
                    if args.summary == "stderr":
                        print(count_output_str, file=sys.stderr)
                    elif args.summary == "stdout" and safe_writer.owns_file:
                        print(count_output_str)
                    else:
                        safe_writer.write("\n" + count_output_str + "\n")

            except BrokenPipeError:
                pass  # SafeWriter will automatically close in the context manager

        if merger.read_error_count:
            print(f"Warning: {merger.read_error_count} file(s) could not be read.", file=sys.stderr)

        if not args.quiet and output is not None and merger.streaming_complete:
            size = format_size(safe_writer.bytes_written)
            print(f"Merged {merger.file_count} files into {output} ({size})", file=sys.stderr)

    except TraversalError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(EXIT_PERMISSION_DENIED if e.is_permission_error else EXIT_ERROR)
    except InvalidRootError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except TokenizerNotAvailableError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        print("To enable token counting, install treemerge with the 'token_counting' extra:", file=sys.stderr)
        print('    pip install "treemerge[token_counting]"', file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    exit_code = signal_handler.exit_code()
    if exit_code is not None:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
