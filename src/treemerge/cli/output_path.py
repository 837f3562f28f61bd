"""Output file naming for the treemerge CLI."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_OUTPUT_DIRECTORY = Path("merged_projects")
STDOUT = "-"
FILENAME_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def default_output_name(project_name: str, now: datetime) -> str:
    """Build the timestamped name of a merged document.

    Example:
        >>> default_output_name("Shop.Api", datetime(2024, 5, 1, 9, 30, 0))
        'Shop.Api_2024-05-01_09-30-00.txt'
    """
    return f"{project_name}_{now.strftime(FILENAME_TIMESTAMP_FORMAT)}.txt"


def prepare_output_directory(directory: Path) -> Path:
    """Create the output directory if needed.

    If the directory cannot be created, a warning is printed and the current
    working directory is used instead.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Warning: Could not create directory {directory}: {e}", file=sys.stderr)
        print("Warning: The current directory will be used instead.", file=sys.stderr)
        return Path.cwd()
    return directory


def resolve_output(
    output: Optional[Path],
    output_dir: Optional[Path],
    project_name: str,
    now: datetime,
) -> Optional[Path]:
    """Decide where the merged document goes.

    Args:
        output: Explicit output file, or ``-`` for stdout.
        output_dir: Directory for an automatically named file.
        project_name: Name of the merged project directory.
        now: Timestamp used in the automatic file name.

    Returns:
        The path of the output file, or None when writing to stdout.
    """
    if output is not None:
        if str(output) == STDOUT:
            return None
        return output

    directory = prepare_output_directory(output_dir if output_dir is not None else DEFAULT_OUTPUT_DIRECTORY)
    return directory / default_output_name(project_name, now)
