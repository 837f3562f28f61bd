from unittest.mock import MagicMock, patch

import pytest

from treemerge.exceptions import TokenizationError, TokenizerNotAvailableError
from treemerge.token_counter import CountResult, TokenCounter, tiktoken_available


@pytest.fixture
def mock_tiktoken_available():
    with patch("importlib.util.find_spec", return_value=True):
        yield


@pytest.fixture
def mock_tiktoken_unavailable():
    with patch("importlib.util.find_spec", return_value=None):
        yield


@pytest.fixture
def mock_encoder():
    encoder = MagicMock()
    encoder.encode.side_effect = lambda text: [0] * len(text)  # Mock tokenization
    return encoder


@pytest.fixture
def counter(mock_tiktoken_available, mock_encoder):
    with patch.object(TokenCounter, "_load_encoder", return_value=mock_encoder):
        yield TokenCounter(model="gpt-4o")


def test_tiktoken_available(mock_tiktoken_available):
    assert tiktoken_available() is True


def test_tiktoken_unavailable(mock_tiktoken_unavailable):
    assert tiktoken_available() is False


def test_counter_without_model():
    counter = TokenCounter()
    assert counter.encoder is None
    assert counter.total_tokens is None

    result = counter.count("line one\nline two\n")
    assert result == CountResult(lines=2, tokens=None, characters=18)
    assert counter.total_tokens is None


def test_model_without_tiktoken(mock_tiktoken_unavailable):
    with pytest.raises(TokenizerNotAvailableError):
        TokenCounter(model="gpt-4o")


def test_counter_with_model(counter, mock_encoder):
    assert counter.encoder is mock_encoder
    assert counter.total_tokens == 0

    result = counter.count("abc\n")
    assert result == CountResult(lines=1, tokens=4, characters=4)
    mock_encoder.encode.assert_called_once_with("abc\n")


def test_totals_accumulate(counter):
    counter.count("FILE: a.cs\n")
    counter.count("int x=1;\n")
    assert counter.total_lines == 2
    assert counter.total_characters == 20
    assert counter.total_tokens == 20


def test_text_without_trailing_newline(counter):
    assert counter.count("no newline").lines == 0


def test_totals_without_encoder():
    plain = TokenCounter()
    plain.count("abc\n")
    assert (plain.total_lines, plain.total_characters, plain.total_tokens) == (1, 4, None)


def test_tokenization_error_keeps_line_totals(counter, mock_encoder):
    mock_encoder.encode.side_effect = RuntimeError("encoder failure")
    with pytest.raises(TokenizationError, match="Failed to tokenize text: encoder failure"):
        counter.count("abc\n")
    assert counter.total_lines == 1
    assert counter.total_characters == 4
    assert counter.total_tokens == 0


def test_unknown_model(mock_tiktoken_available):
    tiktoken = pytest.importorskip("tiktoken")
    with patch.object(tiktoken, "encoding_for_model", side_effect=KeyError("nope")):
        with pytest.raises(ValueError, match="Could not load tokenizer for model 'nope-1'"):
            TokenCounter(model="nope-1")
