"""
Random number streams for the path tracer.

Every worker thread owns its own `random.Random` generator so that
workers never contend on a shared stream and a render can be made
reproducible by seeding each worker deterministically.
"""

from __future__ import annotations
import random
import threading
from typing import List, Optional

import numpy as np

_local = threading.local()


def generator() -> random.Random:
    """Return the calling thread's generator, creating it on first use."""
    rng = getattr(_local, 'rng', None)
    if rng is None:
        rng = random.Random()
        _local.rng = rng
    return rng


def seed(value: Optional[int]) -> None:
    """Reseed the calling thread's generator.

    Args:
        value: Seed value, or None to seed from system entropy
    """
    _local.rng = random.Random(value)


def random_double(min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Uniform draw in [min_val, max_val) from the thread's stream."""
    if min_val == 0.0 and max_val == 1.0:
        return generator().random()
    return min_val + (max_val - min_val) * generator().random()


def spawn_seeds(root_seed: int, count: int) -> List[int]:
    """Derive `count` independent integer seeds from one root seed.

    Uses numpy's SeedSequence so that the per-worker streams are
    statistically independent rather than consecutive integers.
    """
    children = np.random.SeedSequence(root_seed).spawn(count)
    return [int(child.generate_state(1, dtype=np.uint64)[0]) for child in children]
