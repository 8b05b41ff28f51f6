"""
Seeded linear-congruential generator.

Every probability check in a run draws from one of these so that a fixed
seed replays a simulation exactly.
"""

from __future__ import annotations

from typing import Callable

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280


class SeededRandom:
    """Deterministic pseudo-random floats in ``[0, 1)``.

    ``state = (state * 9301 + 49297) mod 233280``; each draw returns
    ``state / 233280``.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.state = self.seed
        self.draws = 0

    def __call__(self) -> float:
        return self.random()

    def random(self) -> float:
        self.state = (self.state * MULTIPLIER + INCREMENT) % MODULUS
        self.draws += 1
        return self.state / MODULUS

    def reset(self) -> None:
        self.state = self.seed
        self.draws = 0


def seed_random(seed: int) -> Callable[[], float]:
    """Return a zero-argument callable producing the seeded sequence."""
    return SeededRandom(seed)
