"""Name-based filter rules deciding which directories and files join a merge."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Tuple

from .base_rules import BaseExclusionRules

DEFAULT_EXCLUDED_DIRECTORIES: Tuple[str, ...] = (
    "bin",
    "obj",
    "Locale",
    "deb",
    "Driver",
    "wwwroot",
    "Linux",
    "Windows",
    "Migrations",
    "integrations",
    "legacy",
)
DEFAULT_EXCLUDED_DIRECTORY_SUBSTRINGS: Tuple[str, ...] = (".Tests",)
DEFAULT_EXCLUDED_EXTENSIONS: Tuple[str, ...] = (".dll", ".po")
DEFAULT_INCLUDED_EXTENSIONS: Tuple[str, ...] = (".cs", ".razor", ".cshtml", ".json", ".props", ".yml")


def get_extension(name: str) -> str:
    """Return the extension of a file name, including the leading dot.

    The extension starts at the last dot of the name. Names without a dot, or
    ending with one, have no extension.

    Example:
        >>> get_extension("Program.cs")
        '.cs'
        >>> get_extension("archive.tar.GZ")
        '.GZ'
        >>> get_extension("Makefile")
        ''
        >>> get_extension("notes.")
        ''
    """
    index = name.rfind(".")
    if index == -1 or index == len(name) - 1:
        return ""
    return name[index:]


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot.

    Example:
        >>> normalize_extension("JSON")
        '.json'
        >>> normalize_extension(".Yml")
        '.yml'
    """
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


def _casefolded(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(value.casefold() for value in values)


@dataclass(frozen=True)
class FilterRules(BaseExclusionRules):
    """Immutable name-based inclusion/exclusion policy.

    Directories are excluded by exact name (case-insensitive), by substring
    (case-insensitive) or for being dot-prefixed. Files are excluded for being
    dot-prefixed, for carrying an excluded extension, or, when an allow-list is
    configured, for carrying no extension or one that is not allowed. The
    exclude-list always wins; the allow-list only narrows what is left.

    Extension entries are normalised on construction, so ``"json"`` and
    ``".JSON"`` both match ``settings.json``.

    Attributes:
        excluded_directories: Directory names excluded on exact match.
        excluded_directory_substrings: Directory names containing any of these are excluded.
        excluded_extensions: File extensions that are never included.
        included_extensions: If non-empty, the only file extensions that are included.
        ignore_dot_files: Whether names starting with ``.`` are excluded.

    Example:
        >>> rules = FilterRules()
        >>> rules.should_exclude_directory("BIN")
        True
        >>> rules.should_exclude_directory("MyApp.Tests")
        True
        >>> rules.should_exclude_file("Program.cs")
        False
        >>> rules.should_exclude_file("README")
        True
    """

    excluded_directories: Tuple[str, ...] = DEFAULT_EXCLUDED_DIRECTORIES
    excluded_directory_substrings: Tuple[str, ...] = DEFAULT_EXCLUDED_DIRECTORY_SUBSTRINGS
    excluded_extensions: Tuple[str, ...] = DEFAULT_EXCLUDED_EXTENSIONS
    included_extensions: Tuple[str, ...] = DEFAULT_INCLUDED_EXTENSIONS
    ignore_dot_files: bool = True

    _directory_names: FrozenSet[str] = field(init=False, repr=False, compare=False)
    _directory_substrings: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    _excluded: FrozenSet[str] = field(init=False, repr=False, compare=False)
    _included: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Accept any iterable (lists from argparse, sets) but store tuples
        object.__setattr__(self, "excluded_directories", tuple(self.excluded_directories))
        object.__setattr__(self, "excluded_directory_substrings", tuple(self.excluded_directory_substrings))
        object.__setattr__(
            self, "excluded_extensions", tuple(normalize_extension(e) for e in self.excluded_extensions if e.strip())
        )
        object.__setattr__(
            self, "included_extensions", tuple(normalize_extension(e) for e in self.included_extensions if e.strip())
        )

        object.__setattr__(self, "_directory_names", _casefolded(self.excluded_directories))
        object.__setattr__(
            self, "_directory_substrings", tuple(s.casefold() for s in self.excluded_directory_substrings if s)
        )
        object.__setattr__(self, "_excluded", _casefolded(self.excluded_extensions))
        object.__setattr__(self, "_included", _casefolded(self.included_extensions))

    def should_exclude_directory(self, name: str) -> bool:
        """Check whether a directory with the given name should be pruned.

        Args:
            name: The directory's base name.

        Returns:
            True if the name matches an excluded name, contains an excluded
            substring, or is dot-prefixed while dot files are ignored.
        """
        folded = name.casefold()
        if folded in self._directory_names:
            return True
        if any(substring in folded for substring in self._directory_substrings):
            return True
        if self.ignore_dot_files and name.startswith("."):
            return True
        return False

    def should_exclude_file(self, name: str) -> bool:
        """Check whether a file with the given name should be left out.

        Args:
            name: The file's base name.

        Returns:
            True if the file is excluded by the dot-file rule, the exclude-list
            or the allow-list.
        """
        if self.ignore_dot_files and name.startswith("."):
            return True

        extension = get_extension(name).casefold()

        if extension and extension in self._excluded:
            return True

        if self._included and (not extension or extension not in self._included):
            return True

        return False

    def exclude(self, path: Path, relative_path: str, is_dir: bool) -> bool:
        if is_dir:
            return self.should_exclude_directory(path.name)
        return self.should_exclude_file(path.name)

