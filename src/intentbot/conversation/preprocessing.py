"""
Text normalisation for intent training and inference.

Lowercases, strips punctuation, stems with the original Porter algorithm
and drops short tokens. The same token stream feeds the vector encoder and
the Bayesian classifier, so both see identical vocabulary.
"""

import re
from typing import List

from nltk.stem import PorterStemmer

from intentbot.config.constants import MIN_TOKEN_LENGTH

# ASCII word characters only; accented letters are stripped like punctuation.
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")


class TextPreprocessor:
    """
    Normalise raw text into stemmed tokens.

    Stateless apart from the stemmer, so a single instance can be shared
    across threads.

    Example:
        >>> TextPreprocessor().tokenize("Hello, how are you?")
        ['hello', 'how', 'you']
    """

    def __init__(self, min_token_length: int = MIN_TOKEN_LENGTH):
        """
        Initialize preprocessor.

        Args:
            min_token_length: Tokens with length <= this are discarded
        """
        self._min_length = min_token_length
        self._stemmer = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)

    def normalize(self, text: str) -> str:
        """Lowercase and strip non-word, non-space characters."""
        return _NON_WORD.sub("", text.lower())

    def tokenize(self, text: str) -> List[str]:
        """
        Convert raw text into stemmed tokens.

        Args:
            text: Raw user text

        Returns:
            Stemmed tokens longer than the minimum length, in input order
        """
        stems = (self._stemmer.stem(word) for word in self.normalize(text).split())
        return [stem for stem in stems if len(stem) > self._min_length]

    def __call__(self, text: str) -> List[str]:
        # Lets the preprocessor act as a scikit-learn analyzer.
        return self.tokenize(text)

    def __repr__(self) -> str:
        return f"TextPreprocessor(min_token_length={self._min_length})"
