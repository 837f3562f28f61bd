"""Regex-driven content minification.

The minifier reduces source text in a fixed pipeline of four stages, each of
which can be switched off through MinifyOptions:

1. comment stripping, selected by file extension from COMMENT_RULES
2. empty-line removal
3. indentation removal
4. whitespace compression

The transform is purely lexical. It knows nothing about string literals, so a
comment-like sequence inside a quoted string (``"http://example.com"`` in a
``.cs`` file, for instance) is stripped as well.
"""

import re
from dataclasses import dataclass
from typing import Dict, Mapping, Pattern, Tuple

from treemerge.exclusion_rules.name_rules import normalize_extension

# A comment-stripping step: every match of the pattern is removed
CommentStep = Pattern[str]

LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
DOC_COMMENT = re.compile(r"///.*$", re.MULTILINE)
MARKUP_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)

C_FAMILY_STEPS: Tuple[CommentStep, ...] = (LINE_COMMENT, BLOCK_COMMENT, DOC_COMMENT)
MARKUP_STEPS: Tuple[CommentStep, ...] = (MARKUP_COMMENT,)
JSON_STEPS: Tuple[CommentStep, ...] = (LINE_COMMENT,)

C_FAMILY_EXTENSIONS = (
    ".cs",
    ".razor",
    ".js",
    ".ts",
    ".jsx",
    ".tsx",
    ".mjs",
    ".java",
    ".kt",
    ".go",
    ".rs",
    ".swift",
    ".c",
    ".h",
    ".cpp",
    ".hpp",
)
MARKUP_EXTENSIONS = (".cshtml", ".html", ".xml", ".xaml")

COMMENT_RULES: Dict[str, Tuple[CommentStep, ...]] = {
    **{extension: C_FAMILY_STEPS for extension in C_FAMILY_EXTENSIONS},
    **{extension: MARKUP_STEPS for extension in MARKUP_EXTENSIONS},
    ".json": JSON_STEPS,
}

WHITESPACE_ONLY_LINE = re.compile(r"^[^\S\n]+$", re.MULTILINE)
EXCESS_NEWLINES = re.compile(r"\n{3,}")
INDENTATION = re.compile(r"^[ \t]+", re.MULTILINE)
HORIZONTAL_WHITESPACE = re.compile(r"[ \t]+")
SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,;:)\]}])")
SPACE_AFTER_OPENING_BRACKET = re.compile(r"([(\[{])\s+")
# No space is removed after '/' or '*' so that no comment delimiter is formed
SPACE_AROUND_OPERATOR = re.compile(r"(?<![/*])[ \t]*([!<>+\-*/%&|^:]?=+>?)[ \t]*")


@dataclass(frozen=True)
class MinifyOptions:
    """Switches for the four minification stages.

    Attributes:
        remove_comments: Strip comments according to the file extension.
        remove_empty_lines: Blank whitespace-only lines and keep at most one blank line in a row.
        remove_indentation: Strip leading spaces and tabs from every line.
        compress_whitespace: Collapse spaces and drop them around punctuation and brackets.
    """

    remove_comments: bool = True
    remove_empty_lines: bool = True
    remove_indentation: bool = True
    compress_whitespace: bool = True

    @classmethod
    def disabled(cls) -> "MinifyOptions":
        """Options that leave content untouched."""
        return cls(False, False, False, False)


def strip_comments(
    text: str, extension: str, rules: Mapping[str, Tuple[CommentStep, ...]] = COMMENT_RULES
) -> str:
    """Remove comments using the steps registered for the extension.

    Extensions without registered steps are returned unchanged.

    Example:
        >>> strip_comments("int a; // note", ".cs")
        'int a; '
        >>> strip_comments('{"a": 1} /* kept */', ".json")
        '{"a": 1} /* kept */'
        >>> strip_comments("<p><!-- gone --></p>", "html")
        '<p></p>'
    """
    for step in rules.get(normalize_extension(extension), ()):
        text = step.sub("", text)
    return text


def remove_empty_lines(text: str) -> str:
    """Blank whitespace-only lines, then collapse runs of blank lines to one.

    Example:
        >>> remove_empty_lines("a\\n  \\n\\t\\n\\nb")
        'a\\n\\nb'
    """
    text = WHITESPACE_ONLY_LINE.sub("", text)
    return EXCESS_NEWLINES.sub("\n\n", text)


def remove_indentation(text: str) -> str:
    """Strip leading spaces and tabs from every line.

    Example:
        >>> remove_indentation("class A\\n{\\n    int b;\\n}")
        'class A\\n{\\nint b;\\n}'
    """
    return INDENTATION.sub("", text)


def _compress_once(text: str, compact_operators: bool) -> str:
    text = HORIZONTAL_WHITESPACE.sub(" ", text)
    text = SPACE_BEFORE_PUNCTUATION.sub(r"\1", text)
    text = SPACE_AFTER_OPENING_BRACKET.sub(r"\1", text)
    if compact_operators:
        text = SPACE_AROUND_OPERATOR.sub(r"\1", text)
    return text


def compress_whitespace(text: str, compact_operators: bool = True) -> str:
    """Squeeze horizontal whitespace and drop it where it carries no meaning.

    Runs of spaces and tabs become a single space. Whitespace, including line
    breaks, is removed before ``. , ; : ) ] }`` and after ``( [ {``. When
    compact_operators is set, spaces around assignment and comparison operators
    are removed as well.

    The passes are repeated until the text stops changing, so applying the
    function to its own output is a no-op.

    Example:
        >>> compress_whitespace("Foo( a ,  b )")
        'Foo(a, b)'
        >>> compress_whitespace("int x  =  1 ;")
        'int x=1;'
        >>> compress_whitespace("int x  =  1 ;", compact_operators=False)
        'int x = 1;'
        >>> compress_whitespace("if (a != b)\\n{\\nreturn;\\n}")
        'if (a!=b)\\n{return;}'
        >>> compress_whitespace(" < =")
        '<='
    """
    while True:
        compressed = _compress_once(text, compact_operators)
        if compressed == text:
            return text
        text = compressed


def minify(
    text: str,
    extension: str,
    options: MinifyOptions = MinifyOptions(),
    comment_rules: Mapping[str, Tuple[CommentStep, ...]] = COMMENT_RULES,
) -> str:
    """Run the minification pipeline on text.

    Args:
        text: Raw file content.
        extension: File extension selecting the comment rules, with or without
            the leading dot; matched case-insensitively.
        options: Which stages to run. All stages run by default.
        comment_rules: Extension to comment-stripping steps table.

    Returns:
        The reduced text. The function has no side effects and always returns the
        same output for the same input.

    Spaces around operators are only removed for C-family extensions, so quoted
    values in configuration and markup files keep their spacing.

    Example:
        >>> minify("// hi\\nint x = 1;\\n\\n\\n", ".cs")
        '\\nint x=1;\\n\\n'
        >>> minify('name: "a = b"', ".yml")
        'name: "a = b"'
    """
    if options.remove_comments:
        text = strip_comments(text, extension, comment_rules)
    if options.remove_empty_lines:
        text = remove_empty_lines(text)
    if options.remove_indentation:
        text = remove_indentation(text)
    if options.compress_whitespace:
        compact_operators = normalize_extension(extension) in C_FAMILY_EXTENSIONS
        text = compress_whitespace(text, compact_operators)
    return text
