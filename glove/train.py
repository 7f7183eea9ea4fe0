import math
import threading
from typing import List, Optional, Tuple

import numpy as np

from glove.errors import DegenerateNormError
from glove.parallel import partition, run_workers

# Training loop: per epoch, shuffle the non-zero co-occurrence entries, split them across
# worker threads, and update the shared word vectors and biases. Reads are unsynchronized;
# writes go through a single lock shared by all workers of the epoch.


class Trainer:
    """SGD over the non-zero entries of a co-occurrence matrix.

    For entry (w1, w2) with count c the prediction is the sum of the components of both
    word vectors plus both biases (not a dot product), weighted by
    min(1, c / max_count) ** alpha against log(c). Vectors and biases are updated in place.

    Attributes:
        cooc (np.ndarray): Co-occurrence matrix, shape (V, V). Read only.
        vectors (np.ndarray): Word vectors, shape (V, D). Shared, mutated in place.
        biases (np.ndarray): Word biases, shape (V,). Shared, mutated in place.
        lock (threading.Lock): Serializes every write to vectors and biases.
    """

    def __init__(
        self,
        cooc: np.ndarray,
        vectors: np.ndarray,
        biases: np.ndarray,
        *,
        learning_rate: float = 0.05,
        alpha: float = 0.75,
        max_count: float = 100,
        threads: int = 2,
        rng: Optional[np.random.Generator] = None,
    ):
        self.cooc = cooc
        self.vectors = vectors
        self.biases = biases
        self.learning_rate = learning_rate
        self.alpha = alpha
        self.max_count = float(max_count)
        self.threads = threads
        self.rng = rng if rng is not None else np.random.default_rng()
        self.lock = threading.Lock()
        self._abort = threading.Event()

    def approximate_concurrent_read(self, w1: int, w2: int) -> Tuple[float, float, float]:
        """Loss and both vector norms for entry (w1, w2), computed without the lock.

        Other workers may be writing the same rows at the same time, so the result can
        mix components from before and after their update. This is intended: only the
        write step is serialized.

        Args:
            w1: Row id.
            w2: Column id.

        Returns:
            Tuple (loss, word_a_norm, word_b_norm).
        """
        count = self.cooc[w1, w2]
        a = self.vectors[w1]
        b = self.vectors[w2]
        prediction = float(a.sum() + b.sum()) + self.biases[w1] + self.biases[w2]
        word_a_norm = math.sqrt(float(np.dot(a, a)))
        word_b_norm = math.sqrt(float(np.dot(b, b)))
        entry_weight = min(1.0, count / self.max_count) ** self.alpha
        # count > 0 for every entry from nonzero_entries
        loss = entry_weight * (prediction - math.log(count))
        return loss, word_a_norm, word_b_norm

    def apply_update(self, w1: int, w2: int, loss: float, word_a_norm: float, word_b_norm: float) -> None:
        """Apply one entry's update. Must be called while holding self.lock.

        Both rows move along vectors[w2]; w1 is updated first, then w2.

        Raises:
            DegenerateNormError: If either norm is zero.
        """
        if word_a_norm == 0.0:
            raise DegenerateNormError(w1)
        if word_b_norm == 0.0:
            raise DegenerateNormError(w2)
        step = self.learning_rate * loss
        self.vectors[w1] = (self.vectors[w1] - step * self.vectors[w2]) / word_a_norm
        self.vectors[w2] = (self.vectors[w2] - step * self.vectors[w2]) / word_b_norm
        self.biases[w1] -= step
        self.biases[w2] -= step

    def work(self, entries: np.ndarray) -> Tuple[float, int]:
        """Process a slice of (w1, w2) entries; returns (sum of losses, entries done)."""
        total = 0.0
        done = 0
        try:
            for w1, w2 in entries:
                if self._abort.is_set():
                    break
                loss, word_a_norm, word_b_norm = self.approximate_concurrent_read(w1, w2)
                with self.lock:
                    self.apply_update(w1, w2, loss, word_a_norm, word_b_norm)
                total += loss
                done += 1
        except Exception:
            self._abort.set()
            raise
        return total, done

    def run_epoch(self, entries: np.ndarray) -> Tuple[float, int]:
        """One pass over a fresh permutation of entries, split across self.threads workers.

        Args:
            entries: Int array of shape (nnz, 2).

        Returns:
            Tuple (mean loss, entries visited).
        """
        self._abort.clear()
        shuffled = entries[self.rng.permutation(len(entries))]

        def worker(start: int, stop: int) -> Tuple[float, int]:
            return self.work(shuffled[start:stop])

        results = run_workers(worker, partition(len(shuffled), self.threads))
        total = sum(r[0] for r in results)
        done = sum(r[1] for r in results)
        return (float(total / done) if done else 0.0), done


def train(
    cooc: np.ndarray,
    vectors: np.ndarray,
    biases: np.ndarray,
    entries: np.ndarray,
    *,
    epochs: int = 5,
    threads: int = 2,
    learning_rate: float = 0.05,
    alpha: float = 0.75,
    max_count: float = 100,
    seed: Optional[int] = None,
    verbose: bool = True,
) -> List[dict]:
    """Run `epochs` sequential epochs of parallel SGD; vectors and biases are modified in place.

    Args:
        cooc: Co-occurrence matrix (V, V).
        vectors: Word vectors (V, D).
        biases: Word biases (V,).
        entries: Non-zero coordinates of cooc, shape (nnz, 2).
        epochs: Number of passes. Defaults to 5.
        threads: Workers per epoch. Defaults to 2.
        learning_rate: SGD step size. Defaults to 0.05.
        alpha: Weighting exponent. Defaults to 0.75.
        max_count: Weighting cutoff. Defaults to 100.
        seed: Seed for the per-epoch shuffles. Defaults to None.
        verbose: Print progress. Defaults to True.

    Returns:
        List of dicts with keys "epoch", "entries", "loss" (mean loss of the epoch).

    Raises:
        DegenerateNormError: If a word vector's norm reaches zero; the run is aborted.
    """
    trainer = Trainer(
        cooc,
        vectors,
        biases,
        learning_rate=learning_rate,
        alpha=alpha,
        max_count=max_count,
        threads=threads,
        rng=np.random.default_rng(seed),
    )
    if verbose:
        print(f"Training: {epochs} epochs over {len(entries)} non-zero entries, {threads} threads")
    history = []
    for epoch in range(epochs):
        loss, done = trainer.run_epoch(entries)
        history.append({"epoch": epoch + 1, "entries": done, "loss": loss})
        if verbose:
            print(f"Epoch {epoch + 1}/{epochs} loss {loss:.4f}")
    return history
