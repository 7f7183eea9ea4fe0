from typing import Dict, List, Optional, Tuple

import numpy as np

from glove.errors import UnknownTokenError

# Queries over trained vectors: cosine similarity, ranked neighbours, analogy filter.


def transform(vectors: np.ndarray, index: Dict[str, int], word: str) -> Optional[np.ndarray]:
    """Row of `vectors` for `word`, or None when the word is not in the vocabulary."""
    word_id = index.get(word)
    if word_id is None:
        return None
    return vectors[word_id]


def cosine(v1: Optional[np.ndarray], v2: Optional[np.ndarray]) -> float:
    """Cosine similarity dot(v1, v2) / (|v1| * |v2|).

    Args:
        v1: First vector, or None for a word that was not found.
        v2: Second vector, or None.

    Returns:
        Similarity in [-1, 1]; 0.0 if either vector is None or has zero norm.
    """
    if v1 is None or v2 is None:
        return 0.0
    v1 = np.asarray(v1, dtype=np.float64).ravel()
    v2 = np.asarray(v2, dtype=np.float64).ravel()
    denom = np.linalg.norm(v1) * np.linalg.norm(v2)
    if denom == 0:
        return 0.0
    return float(np.dot(v1, v2) / denom)


def vector_distance(vectors: np.ndarray, index: Dict[str, int], word: str) -> List[Tuple[str, float]]:
    """Cosine of `word` against every other vocabulary token, best first.

    Ties keep vocabulary id order (the sort is stable).

    Raises:
        UnknownTokenError: If word is not in index.
    """
    vector = transform(vectors, index, word)
    if vector is None:
        raise UnknownTokenError(word)
    scores = [(token, cosine(vector, vectors[i])) for token, i in index.items() if token != word]
    return sorted(scores, key=lambda item: item[1], reverse=True)


def _check_num(num: int) -> None:
    if num < 0:
        raise ValueError(f"num must be >= 0, got {num}")


def most_similar(vectors: np.ndarray, index: Dict[str, int], word: str, num: int = 3) -> List[Tuple[str, float]]:
    _check_num(num)
    return vector_distance(vectors, index, word)[:num]


def analogy_words(
    vectors: np.ndarray,
    index: Dict[str, int],
    word1: str,
    word2: str,
    target: str,
    num: int = 3,
    accuracy: float = 0.0001,
) -> List[Tuple[str, float]]:
    """Words related to `target` the way word1 relates to word2.

    A reference cosine is taken between word1 and word2; candidates from
    vector_distance(target) whose |score| lies within `accuracy` of that reference are
    left out, and the first `num` remaining ones are returned.

    Args:
        vectors: (V, D) word vectors.
        index: Token -> id mapping.
        word1: First word of the pair.
        word2: Second word of the pair.
        target: Word to find relatives of.
        num: Number of words to return. Defaults to 3.
        accuracy: Exclusion band around the reference cosine. Defaults to 0.0001.

    Returns:
        List of (token, score), best first.

    Raises:
        UnknownTokenError: If target is not in index.
        ValueError: If num is negative.
    """
    _check_num(num)
    distance = cosine(transform(vectors, index, word1), transform(vectors, index, word2))
    kept = [item for item in vector_distance(vectors, index, target) if abs(abs(item[1]) - distance) >= accuracy]
    return kept[:num]
