"""
Serial and thread-parallel executors for the block kernel.

Both executors allocate the output once and fill it through
``apply_block``. The parallel one splits ``[0, n)`` into contiguous blocks,
one per worker thread; blocks never overlap, so the threads share the output
buffer without any locking and only synchronize on the final join.
"""
import threading

import numpy as np
from tqdm import tqdm

from .errors import WorkerError
from .workload import ITERATIONS, apply_block


def _as_input(data):
    return np.asarray(data, dtype=np.float64)


def run_serial(data, iterations=ITERATIONS):
    data = _as_input(data)
    results = np.empty_like(data)
    apply_block(data, results, 0, len(data), iterations)
    return results


def partition(n, workers):
    """Split ``[0, n)`` into ``workers`` contiguous (start, stop) blocks.

    Block sizes differ by at most one; the first ``n % workers`` blocks get
    the extra element. Blocks may be empty when ``n < workers``.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")

    base, extra = divmod(n, workers)
    blocks = []
    start = 0
    for w in range(workers):
        stop = start + base + (1 if w < extra else 0)
        blocks.append((start, stop))
        start = stop
    return blocks


def run_parallel(data, workers, iterations=ITERATIONS, kernel=apply_block, progress=False):
    data = _as_input(data)
    results = np.empty_like(data)
    blocks = [b for b in partition(len(data), workers) if b[1] > b[0]]

    # one slot per block, each written only by its own thread
    errors = [None] * len(blocks)

    def worker(idx, start, stop):
        try:
            kernel(data, results, start, stop, iterations)
        except BaseException as e:
            errors[idx] = e

    threads = []
    try:
        for idx, (start, stop) in enumerate(blocks):
            t = threading.Thread(target=worker, args=(idx, start, stop),
                                 name=f"block-{start}-{stop}")
            t.start()
            threads.append(t)
    except BaseException as e:
        # started workers are joined before anything propagates
        for t in threads:
            t.join()
        if isinstance(e, RuntimeError):
            raise WorkerError(f"could not start worker {len(threads) + 1} of {len(blocks)}: {e}",
                              block=blocks[len(threads)]) from e
        raise

    with tqdm(total=len(threads), desc="blocks", disable=not progress) as progress_bar:
        for t in threads:
            t.join()
            progress_bar.update(1)

    for block, err in zip(blocks, errors):
        if err is not None:
            raise WorkerError(f"worker for block [{block[0]}, {block[1]}) failed: {err!r}",
                              block=block) from err

    return results
