# Error kinds raised by the model. Each also subclasses the closest builtin so callers
# that only know about ValueError/KeyError/etc. still catch them.


class GloveError(Exception):
    """Base class for all errors raised by the glove package."""


class EmptyVocabularyError(GloveError, ValueError):
    """No token survived the min_count filter, so there is nothing to train."""


class UnknownTokenError(GloveError, KeyError):
    """A query word is not part of the fitted vocabulary."""

    def __init__(self, word: str):
        super().__init__(word)
        self.word = word

    def __str__(self) -> str:
        return f"'{self.word}' not in vocabulary"


class DegenerateNormError(GloveError, ArithmeticError):
    """A word vector's norm hit exactly zero during training."""

    def __init__(self, word_id: int):
        super().__init__(f"word vector {word_id} has zero norm; training aborted")
        self.word_id = word_id


class UntrainedQueryError(GloveError, RuntimeError):
    """Vectors were requested before train() produced them."""


class NotFittedError(GloveError, RuntimeError):
    """train() was called before fit() built the co-occurrence matrix."""
