"""
Data-parallel fan-out over entity rows, and per-system random streams.

Heavy per-atom kernels call ``par_for_each`` with the row ids returned by a
join. If the world carries a ``WorkerPool`` resource and there are enough
rows, the ids are split into disjoint contiguous chunks that are processed on
the pool's threads; otherwise the kernel runs once over all rows. Chunks never
share an atom, so kernels may write their own rows without locking.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import numpy as np

from .world import Resource


class WorkerPool(Resource):
    """
    Thread pool used by per-atom kernels.

    Parameters
    ----------
    workers : int
        Number of threads.
    min_chunk : int
        Do not split the rows into chunks smaller than this.
    """

    def __init__(self, workers: int = 4, min_chunk: int = 2048):
        self.workers = int(workers)
        self.min_chunk = int(min_chunk)
        self.executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="lasercool-kernel")

    def shutdown(self):
        self.executor.shutdown(wait=True)


def par_for_each(world, rows: np.ndarray, kernel: Callable[[np.ndarray], None]):
    """Apply ``kernel`` to disjoint chunks of ``rows``, in parallel when a pool is available."""
    if len(rows) == 0:
        return
    pool: Optional[WorkerPool] = world.try_resource(WorkerPool)
    if pool is None or pool.workers < 2 or len(rows) < 2 * pool.min_chunk:
        kernel(rows)
        return
    n_chunks = min(pool.workers, len(rows) // pool.min_chunk)
    futures = [pool.executor.submit(kernel, chunk) for chunk in np.array_split(rows, n_chunks)]
    for future in futures:
        future.result()


class RandomSource(Resource):
    """
    Seedable source of independent random generators.

    Each system asks for its own ``numpy.random.Generator`` in ``setup``.
    Streams are spawned from one ``SeedSequence``, so a run is reproducible
    for a fixed seed and a fixed schedule; threads never share a generator.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._sequence = np.random.SeedSequence(seed)
        self._lock = threading.Lock()

    def generator(self) -> np.random.Generator:
        with self._lock:
            child = self._sequence.spawn(1)[0]
        return np.random.default_rng(child)


def system_rng(world) -> np.random.Generator:
    """A fresh generator from the world's ``RandomSource``, or an unseeded one."""
    source = world.try_resource(RandomSource)
    if source is None:
        return np.random.default_rng()
    return source.generator()
