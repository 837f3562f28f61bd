"""Size-based exclusion rules for filtering files by size."""

from pathlib import Path
from typing import Union

from humanfriendly import InvalidSize, parse_size

from .base_rules import BaseExclusionRules


def parse_file_size(size_str: str) -> int:
    """Parse human-readable file size to bytes.

    Args:
        size_str: Size string like '1GB', '500MB', '2.5K', or just '1024'

    Returns:
        Size in bytes

    Raises:
        ValueError: If size_str is not a valid size format

    Example:
        >>> parse_file_size("2KB")
        2000
        >>> parse_file_size("1KiB")
        1024
    """
    try:
        return int(parse_size(size_str))
    except InvalidSize as e:
        raise ValueError(f"Invalid size format '{size_str}': {e}") from e


class SizeExclusionRules(BaseExclusionRules):
    """Exclusion rules based on file size limits.

    Files larger than the configured limit are left out of the merge, which keeps a
    single generated or vendored file from dominating the output. Directories are
    never excluded by size.

    Attributes:
        max_size_bytes (int): Maximum allowed file size in bytes.

    Example:
        >>> rules = SizeExclusionRules("1MB")
        >>> rules.max_size_bytes
        1000000
    """

    def __init__(self, max_size: Union[str, int]):
        """Initialize size exclusion rules.

        Args:
            max_size: Maximum file size, either human-readable ('1GB', '500KB') or bytes.

        Raises:
            ValueError: If max_size is negative or not a valid size.
        """
        if isinstance(max_size, bool):
            raise ValueError(f"max_size must be string or int, got {type(max_size)}")
        if isinstance(max_size, str):
            self.max_size_bytes = parse_file_size(max_size)
        elif isinstance(max_size, int):
            if max_size < 0:
                raise ValueError("Size cannot be negative")
            self.max_size_bytes = max_size
        else:
            raise ValueError(f"max_size must be string or int, got {type(max_size)}")

    def exclude(self, path: Path, relative_path: str, is_dir: bool) -> bool:
        """Check if a file exceeds the size limit.

        Note:
            Returns False for directories and for files whose size cannot be
            determined; symlinks are measured by their target.
        """
        if is_dir:
            return False
        try:
            return path.stat().st_size > self.max_size_bytes
        except OSError:
            return False
