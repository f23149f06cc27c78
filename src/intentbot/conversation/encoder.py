"""
Positional character-code vector encoding.

Each token contributes one slot: the sum of its character codes divided by
1000, placed at the token's position. The scheme is lossy (anagrams and
equal-sum tokens collide) and position-dependent. Persisted networks are
only valid against this exact formula.
"""

from typing import List, Optional, Sequence

import torch

from intentbot.config.constants import VECTOR_SCALE, VECTOR_SIZE
from intentbot.conversation.preprocessing import TextPreprocessor


class VectorEncoder:
    """
    Map text to a fixed-length numeric vector.

    Attributes:
        _preprocessor: Produces the token sequence to encode
        _size: Output vector length
        _scale: Divisor for each token's character-code sum

    Example:
        >>> encoder = VectorEncoder()
        >>> vector = encoder.encode("hello world")
        >>> len(vector)
        100
        >>> vector[0]
        0.532
    """

    def __init__(
        self,
        preprocessor: Optional[TextPreprocessor] = None,
        size: int = VECTOR_SIZE,
        scale: float = VECTOR_SCALE,
    ):
        self._preprocessor = preprocessor or TextPreprocessor()
        self._size = size
        self._scale = scale

    @property
    def size(self) -> int:
        return self._size

    @property
    def preprocessor(self) -> TextPreprocessor:
        return self._preprocessor

    def encode_tokens(self, tokens: Sequence[str]) -> List[float]:
        """
        Encode an already preprocessed token sequence.

        Args:
            tokens: Stemmed tokens

        Returns:
            Vector of exactly `size` floats; unused positions stay 0.0
        """
        vector = [0.0] * self._size
        for index, token in enumerate(tokens[: self._size]):
            vector[index] = sum(ord(char) for char in token) / self._scale
        return vector

    def encode(self, text: str) -> List[float]:
        """Preprocess and encode raw text."""
        return self.encode_tokens(self._preprocessor.tokenize(text))

    def encode_tensor(self, text: str) -> torch.Tensor:
        """Encode raw text straight into a float tensor for the network."""
        return torch.tensor(self.encode(text), dtype=torch.float32)

    def __repr__(self) -> str:
        return f"VectorEncoder(size={self._size}, scale={self._scale})"
