from typing import Optional


class TreeMergeError(Exception):
    """Base class for errors raised by treemerge."""

    pass


class InvalidRootError(TreeMergeError):
    """
    Exception raised when the root path of a merge is missing or is not a directory.

    This error is raised before any traversal takes place, so no output is produced.

    Attributes:
        path (str): The root path that was rejected.

    Example:
        >>> error = InvalidRootError("/no/such/dir", "does not exist")
        >>> str(error)
        'Root path does not exist: /no/such/dir'
    """

    def __init__(self, path: str, reason: str = "is not a directory") -> None:
        self.path = path
        super().__init__(f"Root path {reason}: {path}")


class TraversalError(TreeMergeError):
    """
    Exception raised when a directory cannot be enumerated while building the tree.

    Traversal failures are fatal for the whole run. The originating ``OSError`` is
    chained as ``__cause__`` and also kept in ``cause`` so callers can distinguish
    permission problems from other failures.

    Attributes:
        path (str): The directory that could not be enumerated.
        cause (Optional[OSError]): The underlying filesystem error.

    Example:
        >>> error = TraversalError("/srv/project/private", PermissionError("Permission denied"))
        >>> str(error)
        'Failed to read directory /srv/project/private: Permission denied'
        >>> error.is_permission_error
        True
    """

    def __init__(self, path: str, cause: Optional[OSError] = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"Failed to read directory {path}{detail}")

    @property
    def is_permission_error(self) -> bool:
        return isinstance(self.cause, PermissionError)


class TokenizerNotAvailableError(TreeMergeError):
    """
    Exception raised when attempting to use token counting functionality without the required tokenizer package.

    The tiktoken package is an optional dependency that must be explicitly installed
    using the 'token_counting' extra.

    Attributes:
        message (str): Detailed error message including installation instructions.

    Example:
        >>> error = TokenizerNotAvailableError()
        >>> str(error).startswith('Tokenizer (tiktoken) is not installed')
        True
    """

    def __init__(self, message: str = "Tokenizer (tiktoken) is not installed.") -> None:
        """
        Initialize the exception with an informative error message.

        Args:
            message (str, optional): Base error message. Installation instructions will be
                appended to this message.
        """
        self.message = (
            f"{message} To enable token counting, install treemerge with the 'token_counting' "
            "extra: 'pip install treemerge[token_counting]' or 'poetry install --extras token_counting'."
        )
        super().__init__(self.message)


class TokenizationError(TreeMergeError):
    """
    Exception raised when token counting fails during execution.

    Example:
        >>> error = TokenizationError("Failed to tokenize: invalid input")
        >>> str(error)
        'Failed to tokenize: invalid input'
    """

    pass
