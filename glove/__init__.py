from glove.config import GloveConfig
from glove.corpus import Corpus, TokenPair
from glove.errors import (
    DegenerateNormError,
    EmptyVocabularyError,
    GloveError,
    NotFittedError,
    UnknownTokenError,
    UntrainedQueryError,
)
from glove.model import Glove
from glove.parser import Parser

# GloVe-style word vectors in NumPy: co-occurrence matrix plus multi-threaded SGD.

__all__ = [
    "Glove",
    "GloveConfig",
    "Corpus",
    "TokenPair",
    "Parser",
    "GloveError",
    "EmptyVocabularyError",
    "UnknownTokenError",
    "DegenerateNormError",
    "UntrainedQueryError",
    "NotFittedError",
]
