import os
import re
from functools import lru_cache
from typing import FrozenSet, List

from nltk.stem import PorterStemmer

# Text cleanup before the corpus is built: downcase, strip non-letters, split, drop stop
# words, keep words within a length range, Porter-stem.

STOP_WORDS_PATH = os.path.join(os.path.dirname(__file__), "resources", "en.stop")

# A run of non-letters, or a word that mixes letters and digits (b2b, d0g).
_NON_ALPHABETIC = re.compile(r"([\W\d_]+)|((?=\w*[^\W\d_])(?=\w*\d)\w+)")

_STEMMER = PorterStemmer()


@lru_cache(maxsize=1)
def load_stop_words(path: str = STOP_WORDS_PATH) -> FrozenSet[str]:
    """Read a whitespace-separated stop-word file.

    Args:
        path: Path to the file. Defaults to the bundled English list.

    Returns:
        Frozen set of stop words.
    """
    with open(path, encoding="utf-8") as f:
        return frozenset(f.read().split())


def stem_word(word: str) -> str:
    """Porter-stem a single word (lowercased)."""
    return _STEMMER.stem(word)


class Parser:
    """Turns a string of text into the ordered token list consumed by Corpus.

    Each step can be switched off; tokenize() runs the enabled ones in order:
    downcase, alphabetic, split, stop_words, normalize, stem.

    Attributes:
        text: Raw string before tokenize(), list of tokens after.
    """

    def __init__(
        self,
        text: str,
        stem: bool = True,
        min_length: int = 3,
        max_length: int = 25,
        alphabetic: bool = True,
        normalize: bool = True,
        stop_words: bool = True,
    ):
        self.text = text
        self.use_stem = stem
        self.min_length = min_length
        self.max_length = max_length
        self.use_alphabetic = alphabetic
        self.use_normalize = normalize
        self.use_stop_words = stop_words

    def tokenize(self) -> List[str]:
        """Run the cleanup pipeline and return the tokens in text order."""
        self.downcase()
        if self.use_alphabetic:
            self.alphabetic()
        self.split()
        if self.use_stop_words:
            self.stop_words()
        if self.use_normalize:
            self.normalize()
        if self.use_stem:
            self.stem()
        return self.text

    def downcase(self) -> str:
        self.text = self.text.lower()
        return self.text

    def alphabetic(self) -> str:
        """Replace non-letter runs and letter/digit words with spaces."""
        self.text = _NON_ALPHABETIC.sub(" ", self.text)
        return self.text

    def split(self) -> List[str]:
        self.text = self.text.split()
        return self.text

    def stop_words(self) -> List[str]:
        stop = load_stop_words()
        self.text = [w for w in self.text if w not in stop]
        return self.text

    def normalize(self) -> List[str]:
        """Keep words whose length is within [min_length, max_length]."""
        self.text = [w for w in self.text if self.min_length <= len(w) <= self.max_length]
        return self.text

    def stem(self) -> List[str]:
        self.text = [stem_word(w) for w in self.text]
        return self.text
