from typing import Dict, List, Sequence, Tuple

import numpy as np

from glove.corpus import TokenPair
from glove.parallel import partition, run_workers

# Co-occurrence matrix: cell (i, j) counts how often vocabulary token j shows up in the
# window of an occurrence of token i. Built column-wise; each worker owns a contiguous
# range of columns, so workers never write the same cell and no lock is taken.

EncodedPairs = List[Tuple[int, np.ndarray]]


def encode_pairs(pairs: Sequence[TokenPair], index: Dict[str, int]) -> EncodedPairs:
    """Map each pair to (row id, neighbour ids); neighbours outside the vocabulary are dropped.

    Args:
        pairs: TokenPairs whose token is in index.
        index: Token -> id mapping.

    Returns:
        List of (row, cols) with cols an int64 array (repeats kept).
    """
    encoded = []
    for pair in pairs:
        cols = [index[w] for w in pair.neighbors if w in index]
        encoded.append((index[pair.token], np.asarray(cols, dtype=np.int64)))
    return encoded


def build_columns(encoded: EncodedPairs, vocab_size: int, start: int, stop: int) -> np.ndarray:
    """Compute columns [start, stop) of the co-occurrence matrix.

    Args:
        encoded: Output of encode_pairs (read only).
        vocab_size: V, the number of rows.
        start: First column id.
        stop: One past the last column id.

    Returns:
        Array of shape (V, stop - start).
    """
    block = np.zeros((vocab_size, stop - start), dtype=np.float64)
    for row, cols in encoded:
        own = cols[(cols >= start) & (cols < stop)]
        if own.size:
            # add.at so repeated neighbours each count once
            np.add.at(block[row], own - start, 1.0)
    return block


def cooccurrence_column(
    pairs: Sequence[TokenPair], index: Dict[str, int], token: str
) -> np.ndarray:
    """Column of `token`: entry k counts `token` in the neighbours of pairs whose token has id k."""
    col = index[token]
    return build_columns(encode_pairs(pairs, index), len(index), col, col + 1)[:, 0]


def build_cooccurrence_matrix(
    pairs: Sequence[TokenPair], index: Dict[str, int], threads: int = 1
) -> np.ndarray:
    """Aggregate context pairs into a dense (V, V) count matrix.

    With threads == 1 every column is computed in the calling thread. Otherwise the
    vocabulary ids are split into `threads` contiguous slices, each computed by its own
    worker and written into its own columns. Both strategies give the same matrix.

    Args:
        pairs: Context pairs from Corpus.pairs.
        index: Token -> id mapping from Corpus.index.
        threads: Number of workers. Defaults to 1.

    Returns:
        Float64 array of shape (V, V); (0, 0) for an empty vocabulary.
    """
    V = len(index)
    matrix = np.zeros((V, V), dtype=np.float64)
    if V == 0:
        return matrix
    encoded = encode_pairs(pairs, index)

    def fill(start: int, stop: int) -> None:
        matrix[:, start:stop] = build_columns(encoded, V, start, stop)

    run_workers(fill, partition(V, threads))
    return matrix


def nonzero_entries(matrix: np.ndarray) -> np.ndarray:
    """All (row, col) coordinates where the matrix is non-zero, row-major.

    Args:
        matrix: 2D array.

    Returns:
        Int64 array of shape (nnz, 2).
    """
    return np.argwhere(matrix != 0).astype(np.int64)
