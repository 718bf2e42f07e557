"""
Tokenizer and key deriver for the anagram mapper
"""

import logging
import string
from typing import FrozenSet, Iterator

from common.errors import SourceUnavailable

logger = logging.getLogger(__name__)

ASCII_LETTERS = frozenset(string.ascii_letters)


def load_stop_words(path: str) -> FrozenSet[str]:
    """
    Load a comma-separated stop-word list.

    Args:
        path: Path to the stop-word resource

    Returns:
        Immutable set of lowercase stop words

    Raises:
        SourceUnavailable: If the file cannot be read or is not valid UTF-8
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e

    stop_words = frozenset(
        word.strip().lower()
        for word in contents.replace('\n', ',').split(',')
        if word.strip()
    )
    logger.info(f"Loaded {len(stop_words)} stop words from {path}")
    return stop_words


def normalize(word: str) -> str:
    """Drop every non-ASCII-letter character and lowercase the rest"""
    return ''.join(c for c in word if c in ASCII_LETTERS).lower()


def tokenize(line: str, stop_words: FrozenSet[str] = frozenset()) -> Iterator[str]:
    """
    Yield the normalized tokens of one line of text.

    Punctuation and digits are removed rather than treated as separators,
    so "don't" becomes "dont". Empty results and stop words are skipped.
    """
    for raw_word in line.split():
        token = normalize(raw_word)
        if token and token not in stop_words:
            yield token


def signature(token: str) -> str:
    """Canonical anagram key: the token's letters in ascending order"""
    return ''.join(sorted(token))
