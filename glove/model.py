import json
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from glove import eval as queries
from glove.config import GloveConfig
from glove.cooccurrence import build_cooccurrence_matrix, nonzero_entries
from glove.corpus import Corpus, TokenPair
from glove.errors import EmptyVocabularyError, NotFittedError, UntrainedQueryError
from glove.parser import stem_word
from glove.train import train as train_epochs

# GloVe-style model: fit() builds the corpus and co-occurrence matrix, train() fits word
# vectors and biases, then similarity and analogy queries read the trained vectors.


class Glove:
    """Word vectors and biases trained on a token co-occurrence matrix.

    Attributes:
        config (GloveConfig): Hyperparameters.
        corpus (Optional[Corpus]): Set by fit().
        cooc_matrix (Optional[np.ndarray]): (V, V) co-occurrence counts, set by fit().
        word_vec (Optional[np.ndarray]): (V, D) word vectors, set by train().
        word_biases (Optional[np.ndarray]): (V,) word biases, set by train().
        history (List[dict]): Per-epoch "epoch", "entries", "loss" from the last train().
    """

    def __init__(self, config: Optional[GloveConfig] = None, **overrides):
        """Create an untrained model.

        Args:
            config: Base configuration. Defaults to GloveConfig().
            **overrides: Individual config fields to replace (window=3, threads=4, ...).
        """
        config = config if config is not None else GloveConfig()
        self.config = config.update(**overrides) if overrides else config
        self.corpus: Optional[Corpus] = None
        self.cooc_matrix: Optional[np.ndarray] = None
        self.word_vec: Optional[np.ndarray] = None
        self.word_biases: Optional[np.ndarray] = None
        self.history: List[dict] = []
        self.trained = False

    def __repr__(self) -> str:
        return (
            f"Glove(vocab_size={self.vocab_size}, num_components={self.config.num_components}, "
            f"trained={self.trained})"
        )

    @property
    def token_index(self) -> Dict[str, int]:
        return self.corpus.index if self.corpus is not None else {}

    @property
    def token_pairs(self) -> List[TokenPair]:
        return self.corpus.pairs if self.corpus is not None else []

    @property
    def vocab_size(self) -> int:
        return len(self.token_index)

    def fit(self, text: Union[str, Corpus, Sequence[str]]) -> "Glove":
        """Build the corpus and the co-occurrence matrix.

        Args:
            text: Raw text (run through Parser with the config's parser options), a
                prepared Corpus, or an already tokenized sequence of strings.

        Returns:
            self
        """
        cfg = self.config
        if isinstance(text, Corpus):
            corpus = text
        elif isinstance(text, str):
            corpus = Corpus.from_text(text, window=cfg.window, min_count=cfg.min_count, **cfg.parser_options())
        else:
            corpus = Corpus.build(list(text), window=cfg.window, min_count=cfg.min_count)
        self.corpus = corpus
        self.cooc_matrix = build_cooccurrence_matrix(corpus.pairs, corpus.index, threads=cfg.threads)
        self.word_vec = None
        self.word_biases = None
        self.history = []
        self.trained = False
        return self

    def train(self) -> "Glove":
        """Initialize vectors in [0, 1) and biases at zero, then run the SGD epochs.

        Returns:
            self

        Raises:
            NotFittedError: If fit() has not been called.
            EmptyVocabularyError: If no token met min_count.
            DegenerateNormError: If a word vector's norm reached zero; the model stays untrained.
        """
        if self.cooc_matrix is None:
            raise NotFittedError("call fit() before train()")
        V = self.vocab_size
        if V == 0:
            raise EmptyVocabularyError(f"no token occurs at least min_count={self.config.min_count} times")
        cfg = self.config
        rng = np.random.default_rng(cfg.seed)
        self.trained = False
        self.word_vec = rng.random((V, cfg.num_components))
        self.word_biases = np.zeros(V, dtype=np.float64)
        self.history = train_epochs(
            self.cooc_matrix,
            self.word_vec,
            self.word_biases,
            nonzero_entries(self.cooc_matrix),
            epochs=cfg.epochs,
            threads=cfg.threads,
            learning_rate=cfg.learning_rate,
            alpha=cfg.alpha,
            max_count=cfg.max_count,
            seed=int(rng.integers(0, 2**31)) if cfg.seed is not None else None,
            verbose=cfg.verbose,
        )
        self.trained = True
        return self

    def _require_trained(self) -> None:
        if not self.trained:
            raise UntrainedQueryError("model has no trained vectors; call fit() and train() first")

    def _query_token(self, word: str) -> str:
        # Query words go through the same stemming as the corpus tokens.
        return stem_word(word) if self.corpus is not None and self.corpus.stemmed else word

    def transform(self, word: str) -> Optional[np.ndarray]:
        """Vector of `word` as stored in the vocabulary (no stemming); None if absent."""
        self._require_trained()
        return queries.transform(self.word_vec, self.token_index, word)

    @staticmethod
    def cosine(v1: Optional[np.ndarray], v2: Optional[np.ndarray]) -> float:
        return queries.cosine(v1, v2)

    def vector_distance(self, word: str) -> List[Tuple[str, float]]:
        self._require_trained()
        return queries.vector_distance(self.word_vec, self.token_index, word)

    def most_similar(self, word: str, num: int = 3) -> List[Tuple[str, float]]:
        """The `num` words closest to `word` by cosine, best first.

        Raises:
            UntrainedQueryError: Before train().
            UnknownTokenError: If the (stemmed) word is not in the vocabulary.
            ValueError: If num is negative.
        """
        self._require_trained()
        return queries.most_similar(self.word_vec, self.token_index, self._query_token(word), num)

    def analogy_words(
        self, word1: str, word2: str, target: str, num: int = 3, accuracy: float = 0.0001
    ) -> List[Tuple[str, float]]:
        """Words that relate to `target` like word1 relates to word2 (see eval.analogy_words).

        The reference pair is (word1, word1): word2 is replaced by word1 before the
        reference cosine is taken.
        """
        self._require_trained()
        word1 = self._query_token(word1)
        word2 = word1
        target = self._query_token(target)
        return queries.analogy_words(
            self.word_vec, self.token_index, word1, word2, target, num=num, accuracy=accuracy
        )

    def save(self, corpus_path: str, cooc_path: str, vec_path: str, bias_path: str) -> None:
        """Write the corpus (JSON) and matrix, vectors and biases (numpy .npy format).

        Raises:
            UntrainedQueryError: Before train().
        """
        self._require_trained()
        corpus = {
            "tokens": self.corpus.tokens,
            "window": self.corpus.window,
            "min_count": self.corpus.min_count,
            "stemmed": self.corpus.stemmed,
        }
        with open(corpus_path, "w", encoding="utf-8") as f:
            json.dump(corpus, f)
        for path, array in ((cooc_path, self.cooc_matrix), (vec_path, self.word_vec), (bias_path, self.word_biases)):
            with open(path, "wb") as f:
                np.save(f, array)

    def load(self, corpus_path: str, cooc_path: str, vec_path: str, bias_path: str) -> "Glove":
        """Restore a model written by save(); index and pairs are rebuilt from the tokens.

        Returns:
            self

        Raises:
            ValueError: If the array shapes do not match the rebuilt vocabulary.
        """
        with open(corpus_path, encoding="utf-8") as f:
            data = json.load(f)
        corpus = Corpus.build(
            data["tokens"], window=data["window"], min_count=data["min_count"], stemmed=data["stemmed"]
        )
        arrays = []
        for path in (cooc_path, vec_path, bias_path):
            with open(path, "rb") as f:
                arrays.append(np.load(f, allow_pickle=False))
        cooc, vec, biases = arrays
        V = corpus.vocab_size
        if cooc.shape != (V, V):
            raise ValueError(f"co-occurrence matrix shape {cooc.shape} does not match vocabulary size {V}")
        if vec.ndim != 2 or vec.shape[0] != V:
            raise ValueError(f"word vector shape {vec.shape} does not match vocabulary size {V}")
        if biases.shape != (V,):
            raise ValueError(f"word bias shape {biases.shape} does not match vocabulary size {V}")
        self.config = self.config.update(
            window=corpus.window, min_count=corpus.min_count, num_components=vec.shape[1], stem=corpus.stemmed
        )
        self.corpus = corpus
        self.cooc_matrix = cooc
        self.word_vec = vec
        self.word_biases = biases
        self.history = []
        self.trained = True
        return self
