from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from glove.parser import Parser

# Vocabulary and context pairs: token counts filtered by min_count, dense ids in
# first-encounter order, and one TokenPair per kept occurrence with its window neighbours.


@dataclass
class TokenPair:
    """A token occurrence and the neighbouring tokens inside its window."""

    token: str
    neighbors: List[str] = field(default_factory=list)


def build_count(tokens: List[str], min_count: int) -> Dict[str, int]:
    """Count tokens and drop the ones occurring fewer than min_count times.

    Args:
        tokens: Ordered token sequence.
        min_count: Minimum total count for a token to be kept.

    Returns:
        Dict token -> count, in first-encounter order.
    """
    return {w: c for w, c in Counter(tokens).items() if c >= min_count}


def build_index(count: Dict[str, int]) -> Dict[str, int]:
    """Assign dense ids 0..V-1 to the kept tokens in first-encounter order."""
    return {w: i for i, w in enumerate(count)}


class Corpus:
    """Token sequence plus the count, index and pairs derived from it.

    Attributes:
        tokens (List[str]): All tokens in the order they appear in the text.
        window (int): Neighbours taken on each side of a token.
        min_count (int): Minimum count for a token to enter the vocabulary.
        stemmed (bool): Whether tokens were Porter-stemmed by the parser; queries
            against this corpus are stemmed the same way.
    """

    def __init__(self, tokens: List[str], window: int = 2, min_count: int = 5, stemmed: bool = False):
        self.tokens = list(tokens)
        self.window = window
        self.min_count = min_count
        self.stemmed = stemmed
        self._count: Optional[Dict[str, int]] = None
        self._index: Optional[Dict[str, int]] = None
        self._pairs: Optional[List[TokenPair]] = None

    @classmethod
    def build(cls, tokens: List[str], window: int = 2, min_count: int = 5, stemmed: bool = False) -> "Corpus":
        """Create a corpus and build its count, index and pairs."""
        return cls(tokens, window=window, min_count=min_count, stemmed=stemmed).build_tokens()

    @classmethod
    def from_text(cls, text: str, window: int = 2, min_count: int = 5, **parser_options) -> "Corpus":
        """Tokenize text with Parser and build a corpus from the tokens.

        Args:
            text: Raw text.
            window: Context window on each side. Defaults to 2.
            min_count: Vocabulary count threshold. Defaults to 5.
            **parser_options: Forwarded to Parser (stem, stop_words, ...).

        Returns:
            Built Corpus.
        """
        tokens = Parser(text, **parser_options).tokenize()
        return cls.build(tokens, window=window, min_count=min_count, stemmed=parser_options.get("stem", True))

    @classmethod
    def from_file(cls, path: str, window: int = 2, min_count: int = 5, **parser_options) -> "Corpus":
        """Build a corpus from a text file (read as a single blob)."""
        with open(path, encoding="utf-8") as f:
            text = f.read()
        return cls.from_text(text, window=window, min_count=min_count, **parser_options)

    def build_tokens(self) -> "Corpus":
        self._count = build_count(self.tokens, self.min_count)
        self._index = build_index(self._count)
        self._pairs = self._build_pairs()
        return self

    @property
    def count(self) -> Dict[str, int]:
        """Token -> total occurrences, for tokens with count >= min_count."""
        if self._count is None:
            self._count = build_count(self.tokens, self.min_count)
        return self._count

    @property
    def index(self) -> Dict[str, int]:
        """Token -> dense id in [0, V)."""
        if self._index is None:
            self._index = build_index(self.count)
        return self._index

    @property
    def pairs(self) -> List[TokenPair]:
        """One TokenPair per occurrence of a vocabulary token, in text order."""
        if self._pairs is None:
            self._pairs = self._build_pairs()
        return self._pairs

    @property
    def vocab_size(self) -> int:
        return len(self.index)

    def neighbors(self, position: int) -> List[str]:
        """Tokens within window positions of `position`, excluding any equal to its token.

        Args:
            position: Index into tokens.

        Returns:
            Neighbour tokens in text order; repeats are kept.
        """
        word = self.tokens[position]
        start = max(0, position - self.window)
        end = min(len(self.tokens) - 1, position + self.window)
        return [w for w in self.tokens[start : end + 1] if w != word]

    def _build_pairs(self) -> List[TokenPair]:
        count = self.count
        return [TokenPair(w, self.neighbors(p)) for p, w in enumerate(self.tokens) if w in count]
