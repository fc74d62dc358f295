"""
Independent standard-normal streams for parallel simulation workers.

Each stream owns its own ``numpy.random.Generator`` over a ``Philox`` bit
generator. Streams for concurrent workers are spawned from one root
``SeedSequence`` so they are statistically independent; a stream is never
shared between workers and needs no locking.
"""

from typing import Optional, Union

import numpy as np

SeedLike = Union[int, np.random.SeedSequence, None]


class NormalStream:
    """
    Source of i.i.d. N(0, 1) variates.

    Args:
        seed: Integer seed, SeedSequence, or None for OS entropy
    """

    def __init__(self, seed: SeedLike = None):
        self._seed_seq = root_seed_sequence(seed)
        self._rng = np.random.Generator(np.random.Philox(self._seed_seq))

    @property
    def entropy(self) -> int:
        """Root entropy of the stream, enough to reproduce it."""
        return self._seed_seq.entropy

    @property
    def spawn_key(self) -> tuple:
        return self._seed_seq.spawn_key

    def next_standard_normal(self) -> float:
        """Draw a single standard normal variate."""
        return float(self._rng.standard_normal())

    def standard_normal(self, size) -> np.ndarray:
        """Draw a block of standard normal variates with the given shape."""
        return self._rng.standard_normal(size)

    def spawn(self, n: int) -> list["NormalStream"]:
        """Create ``n`` child streams with independent seeds."""
        return [NormalStream(child) for child in self._seed_seq.spawn(n)]


def spawn_streams(n: int, seed: SeedLike = None) -> list[NormalStream]:
    """
    Create ``n`` independent streams, one per worker.

    With a fixed ``seed`` the streams are reproducible; with None each call
    draws fresh entropy.

    Args:
        n: Number of streams
        seed: Root seed shared by the whole run

    Returns:
        List of ``n`` independent NormalStream objects
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return NormalStream(seed).spawn(n)


def root_seed_sequence(seed: SeedLike = None) -> np.random.SeedSequence:
    """Normalise a seed argument into a SeedSequence."""
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)
