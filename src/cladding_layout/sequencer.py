"""Element size sequencing and reproducible per-region seeding."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from cladding_layout.contracts import SequenceMode

SYNC_BASE_SEED = 12345
SYNC_REGION_STRIDE = 100


class ValueSequencer:
    """Supplies successive element sizes from a candidate list.

    Sequential mode cycles through the list; random mode draws uniformly
    from it with the supplied generator. The generator is shared state: the
    grid, the anchor jitter and both sequencers of a region draw from the
    same one, so the draw order is part of the layout's identity.
    """

    def __init__(
        self,
        values: Sequence[float],
        mode: SequenceMode = SequenceMode.SEQUENTIAL,
        rng: Optional[np.random.Generator] = None,
    ):
        if len(values) == 0:
            raise ValueError("ValueSequencer needs at least one candidate size")
        if any(v <= 0 for v in values):
            raise ValueError(f"Candidate sizes must be positive, got {list(values)}")
        if mode is SequenceMode.RANDOM and rng is None:
            raise ValueError("Random sequencing needs a generator")
        self.values = tuple(float(v) for v in values)
        self.mode = mode
        self.rng = rng
        self.index = 0

    def next(self) -> float:
        if self.mode is SequenceMode.RANDOM and len(self.values) > 1:
            return self.values[int(self.rng.integers(0, len(self.values)))]
        value = self.values[self.index % len(self.values)]
        self.index += 1
        return value

    @property
    def average(self) -> float:
        return sum(self.values) / len(self.values)


def region_seed(region_index: int, base_seed: Optional[int] = None) -> int:
    """Deterministic seed for a region ordinal in a synchronized run."""
    base = SYNC_BASE_SEED if base_seed is None else int(base_seed)
    return base + SYNC_REGION_STRIDE * int(region_index)


def region_generator(
    region_index: int,
    synchronize: bool,
    base_seed: Optional[int] = None,
    shared: Optional[np.random.Generator] = None,
) -> np.random.Generator:
    """Generator for one region.

    Synchronized runs get a fresh generator seeded from the region ordinal,
    so the same region set always reproduces the same layouts. Otherwise
    the run-wide *shared* generator is reused (or a new one from
    *base_seed*, which is entropy-seeded when ``None``).
    """
    if synchronize:
        return np.random.default_rng(region_seed(region_index, base_seed))
    if shared is not None:
        return shared
    return np.random.default_rng(base_seed)
