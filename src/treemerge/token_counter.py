"""Running totals of lines, characters and tokens in merged output.

Token counting uses OpenAI's tiktoken library, which is an optional dependency
(the ``token_counting`` extra). Without a model, or without tiktoken, only lines
and characters are counted.
"""

import importlib.util
from typing import Any, NamedTuple, Optional

from treemerge.exceptions import TokenizationError, TokenizerNotAvailableError


class CountResult(NamedTuple):
    lines: int
    tokens: Optional[int]
    characters: int


def tiktoken_available() -> bool:
    """Check if the tiktoken library is available."""
    return importlib.util.find_spec("tiktoken") is not None


class TokenCounter:
    """Accumulates counts over every chunk of a merged document.

    Attributes:
        model (Optional[str]): Model whose tokenizer is used, or None when token
            counting is disabled.
        encoder (Optional[Any]): The tiktoken encoding, when token counting is enabled.

    Example:
        >>> counter = TokenCounter()
        >>> counter.count("FILE: a.cs\\nint x=1;\\n")
        CountResult(lines=2, tokens=None, characters=20)
        >>> counter.total_lines
        2

    Raises:
        TokenizerNotAvailableError: If a model is given but tiktoken is not installed.
        ValueError: If tiktoken has no tokenizer for the model.
    """

    def __init__(self, model: Optional[str] = None) -> None:
        self.model = model
        self.encoder: Optional[Any] = None

        if model is not None:
            if not tiktoken_available():
                raise TokenizerNotAvailableError()
            self.encoder = self._load_encoder(model)

        self.total_lines = 0
        self.total_characters = 0
        self.total_tokens: Optional[int] = 0 if self.encoder is not None else None

    @staticmethod
    def _load_encoder(model: str) -> Any:
        import tiktoken

        try:
            return tiktoken.encoding_for_model(model)
        except KeyError:
            raise ValueError(
                f"Could not load tokenizer for model '{model}'. Consider a well-supported model such as "
                "'gpt-4' or 'gpt-4o'; counts from a similar model's tokenizer are useful approximations."
            )

    def count(self, text: str) -> CountResult:
        """Count text and add the result to the running totals.

        Raises:
            TokenizationError: If the encoder fails on the text. Line and character
                totals are updated before tokenizing, so they stay accurate.
        """
        lines = text.count("\n")
        characters = len(text)
        self.total_lines += lines
        self.total_characters += characters

        tokens = None
        if self.encoder is not None:
            try:
                tokens = len(self.encoder.encode(text))
            except Exception as e:
                raise TokenizationError(f"Failed to tokenize text: {e}") from e
            self.total_tokens = (self.total_tokens or 0) + tokens

        return CountResult(lines=lines, tokens=tokens, characters=characters)
