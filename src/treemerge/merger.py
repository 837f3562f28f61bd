"""Project merging with streaming support.

This module turns a filtered project tree into one framed text document. Files
are visited pre-order with the files of a directory before its subdirectories;
each one is read, minified and emitted between a ``FILE:`` marker line and a
closing ``====`` line.
"""

from datetime import datetime
from typing import Callable, Iterator, Optional

from treemerge.exceptions import TokenizationError
from treemerge.exclusion_rules.base_rules import BaseExclusionRules
from treemerge.minifier import minify
from treemerge.settings import MergeSettings
from treemerge.token_counter import TokenCounter
from treemerge.tree.nodes import DirectoryNode, FileNode
from treemerge.tree.tree_builder import TreeBuilder, count_directories, count_files, iterate_files
from treemerge.types import PathType

DIVIDER = "=" * 65
END_MARKER = "===="
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_file_marker(file_node: FileNode) -> str:
    return f"FILE: {file_node.relative_path}"


def format_read_error(error: Exception) -> str:
    return f"[Error reading file: {error}]"


class StreamingProjectMerger:
    """Streaming project merger that writes one file at a time.

    The tree is built during construction, so file and directory counts are final
    immediately and traversal errors surface before any output is produced. Each
    file's content is loaded, minified and yielded before the next file is read.

    Streaming properties:
    - The header and the contents can each be streamed only once
    - Line, character and token counts grow as output is streamed
    - A file that cannot be read is still framed, with an error marker as its body

    Attributes:
        directory (PathType): Project root being merged.
        settings (MergeSettings): Filter and minification configuration.
        root (DirectoryNode): Root of the filtered tree.

    Example:
        >>> merger = StreamingProjectMerger("src")  # doctest: +SKIP
        >>> for chunk in merger.stream():  # doctest: +SKIP
        ...     print(chunk, end="")
        =================================================================
        PROJECT: src
        GENERATED: 2024-05-01 12:00:00
        =================================================================
        <BLANKLINE>
        FILE: Program.cs
        ...

    Raises:
        InvalidRootError: If directory is missing or not a directory.
        TraversalError: If a directory cannot be enumerated.
        TokenizerNotAvailableError: If a tokenizer model is given without tiktoken.
    """

    def __init__(
        self,
        directory: PathType,
        *,
        settings: Optional[MergeSettings] = None,
        extra_rules: Optional[BaseExclusionRules] = None,
        tokenizer_model: Optional[str] = None,
        follow_symlinks: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize a merge and build the project tree.

        Args:
            directory: Project root. Can be any path-like object.
            settings: Merge configuration. Defaults to MergeSettings().
            extra_rules: Additional exclusion rules (patterns, size limits) applied
                after the name-based filter rules.
            tokenizer_model: Model used for token counting, or None to disable it.
            follow_symlinks: Whether to descend into symlinked directories.
            clock: Source of the generation timestamp written in the header.
        """
        self.directory = directory
        self.settings = settings if settings is not None else MergeSettings()
        self._clock = clock

        # Counter first: a missing tokenizer should fail before the walk
        self._counter = TokenCounter(model=tokenizer_model)

        builder = TreeBuilder(self.settings.filter_rules, extra_rules, follow_symlinks=follow_symlinks)
        self.root: DirectoryNode = builder.build(directory)

        self._file_count = count_files(self.root)
        self._directory_count = count_directories(self.root)
        self._read_error_count = 0

        self._header_complete = False
        self._contents_complete = False

    @property
    def project_name(self) -> str:
        return self.root.absolute_path.name

    @property
    def file_count(self) -> int:
        """Number of files that will be merged."""
        return self._file_count

    @property
    def directory_count(self) -> int:
        """Number of directories below the root that survived filtering."""
        return self._directory_count

    @property
    def read_error_count(self) -> int:
        """Number of files whose content could not be read so far."""
        return self._read_error_count

    @property
    def line_count(self) -> int:
        return self._counter.total_lines

    @property
    def character_count(self) -> int:
        return self._counter.total_characters

    @property
    def token_count(self) -> Optional[int]:
        """Tokens streamed so far, or None if token counting is disabled."""
        return self._counter.total_tokens

    @property
    def streaming_complete(self) -> bool:
        return self._header_complete and self._contents_complete

    def _count_and_yield(self, text: str) -> str:
        try:
            self._counter.count(text)
        except TokenizationError:
            # Continue even if token counting fails
            pass
        return text

    def stream_header(self) -> Iterator[str]:
        """Stream the document header.

        Raises:
            RuntimeError: If the header has already been streamed.
        """
        if self._header_complete:
            raise RuntimeError("Header has already been streamed")

        generated = self._clock().strftime(TIMESTAMP_FORMAT)
        for line in (DIVIDER, f"PROJECT: {self.project_name}", f"GENERATED: {generated}", DIVIDER, ""):
            yield self._count_and_yield(line + "\n")

        self._header_complete = True

    def read_content(self, file_node: FileNode) -> str:
        """Read and minify a single file.

        Returns:
            The minified content, or an error marker if the file could not be read
            or decoded. The result always ends with a newline.
        """
        try:
            with open(file_node.absolute_path, "r", encoding=self.settings.encoding) as f:
                content = f.read()
        except (OSError, UnicodeError) as e:
            self._read_error_count += 1
            return format_read_error(e) + "\n"

        content = minify(content, file_node.extension, self.settings.minify_options)
        if not content.endswith("\n"):
            content += "\n"
        return content

    def stream_contents(self) -> Iterator[str]:
        """Stream every file framed by its marker lines.

        Raises:
            RuntimeError: If contents have already been streamed.
        """
        if self._contents_complete:
            raise RuntimeError("Contents have already been streamed")

        for file_node in iterate_files(self.root):
            yield self._count_and_yield(format_file_marker(file_node) + "\n")
            yield self._count_and_yield(self.read_content(file_node))
            yield self._count_and_yield(END_MARKER + "\n")

        self._contents_complete = True

    def stream(self) -> Iterator[str]:
        """Stream the complete document: header, then contents."""
        yield from self.stream_header()
        yield from self.stream_contents()


class ProjectMerger(StreamingProjectMerger):
    """Merger that produces the whole document during construction.

    Memory Usage Note:
        The complete merged document is held in memory. Use StreamingProjectMerger
        for large projects.

    Example:
        >>> merger = ProjectMerger("src")  # doctest: +SKIP
        >>> merger.text.startswith("=" * 65)  # doctest: +SKIP
        True
    """

    def __init__(self, directory: PathType, **kwargs: object) -> None:
        super().__init__(directory, **kwargs)  # type: ignore[arg-type]
        self._text = "".join(self.stream())

    @property
    def text(self) -> str:
        return self._text
