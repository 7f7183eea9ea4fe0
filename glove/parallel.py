from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, Tuple

# Fixed-size worker pools for the co-occurrence build and each training epoch.
# Work is cut into contiguous slices; every worker is joined before returning.


def partition(n: int, parts: int) -> List[Tuple[int, int]]:
    """Split range(n) into `parts` contiguous (start, stop) slices.

    Each slice has n // parts items; the last one absorbs the remainder. Empty
    slices (n < parts) are dropped.

    Args:
        n: Number of items.
        parts: Number of slices (threads).

    Returns:
        List of (start, stop) bounds covering [0, n) without overlap.
    """
    if parts < 1:
        raise ValueError(f"parts must be >= 1, got {parts}")
    size = n // parts
    bounds = []
    for k in range(parts):
        start = k * size
        stop = n if k == parts - 1 else start + size
        if stop > start:
            bounds.append((start, stop))
    return bounds


def run_workers(fn: Callable[[int, int], object], bounds: Sequence[Tuple[int, int]]) -> list:
    """Run fn(start, stop) for every slice on its own thread and join them all.

    A single slice runs in the calling thread. If any worker raises, the first
    exception (in slice order) is re-raised once all workers have finished.

    Returns:
        Results of fn in slice order.
    """
    if len(bounds) <= 1:
        return [fn(start, stop) for start, stop in bounds]
    with ThreadPoolExecutor(max_workers=len(bounds)) as executor:
        futures = [executor.submit(fn, start, stop) for start, stop in bounds]
    # Leaving the with-block joined every worker.
    return [f.result() for f in futures]
