from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

# Hyperparameters for the corpus, co-occurrence build and training loop, in one place.


@dataclass(frozen=True)
class GloveConfig:
    """Configuration for a Glove model.

    Attributes:
        window (int): Context words taken on each side of a token.
        min_count (int): Tokens occurring fewer times are dropped from the vocabulary.
        max_count (int): Cutoff in the weighting function min(1, count / max_count) ** alpha.
        learning_rate (float): Step size of the SGD updates.
        alpha (float): Exponent of the weighting function.
        num_components (int): Dimension D of the word vectors.
        epochs (int): Number of passes over the shuffled non-zero entries.
        threads (int): Workers used for the co-occurrence build and each training epoch.
        seed (Optional[int]): Seed for vector initialization and per-epoch shuffles.
        verbose (bool): Print training progress.
        stem (bool): Parser option; Porter-stem tokens (and query words).
        min_length (int): Parser option; shortest token kept when normalizing.
        max_length (int): Parser option; longest token kept when normalizing.
        alphabetic (bool): Parser option; strip non-letters and letter/digit words.
        normalize (bool): Parser option; apply the min_length/max_length filter.
        stop_words (bool): Parser option; drop English stop words.
    """

    window: int = 2
    min_count: int = 5
    max_count: int = 100
    learning_rate: float = 0.05
    alpha: float = 0.75
    num_components: int = 30
    epochs: int = 5
    threads: int = 2
    seed: Optional[int] = None
    verbose: bool = True
    stem: bool = True
    min_length: int = 3
    max_length: int = 25
    alphabetic: bool = True
    normalize: bool = True
    stop_words: bool = True

    def __post_init__(self):
        if self.window < 0:
            raise ValueError(f"window must be >= 0, got {self.window}")
        if self.min_count < 1:
            raise ValueError(f"min_count must be >= 1, got {self.min_count}")
        if self.max_count <= 0:
            raise ValueError(f"max_count must be > 0, got {self.max_count}")
        if self.num_components < 1:
            raise ValueError(f"num_components must be >= 1, got {self.num_components}")
        if self.epochs < 0:
            raise ValueError(f"epochs must be >= 0, got {self.epochs}")
        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")

    def update(self, **overrides) -> "GloveConfig":
        """Return a copy with the given fields replaced.

        Raises:
            TypeError: If an override does not name a config field.
        """
        names = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - names)
        if unknown:
            raise TypeError(f"Unknown config option(s): {', '.join(unknown)}")
        return replace(self, **overrides)

    def parser_options(self) -> dict:
        """Subset of options forwarded to the Parser."""
        opts = asdict(self)
        return {k: opts[k] for k in ("stem", "min_length", "max_length", "alphabetic", "normalize", "stop_words")}
