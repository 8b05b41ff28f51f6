"""
Run configuration for the economic pressure simulator.

Everything that tunes a run (iterations, seed, log verbosity, snapshot
sampling) lives here; the economy itself lives in the system and scenario.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import numpy as np

from ecopressure.core.runlog import LOG_LEVELS


@dataclass
class SimulationConfig:
    """
    Run settings, serialisable for comparison and replay.

    Use ``to_dict()`` / ``from_dict()`` for serialization and comparison.
    """

    # === Inputs ===
    scenario_id: str = ""
    system_id: str = ""

    # === Replay ===
    iterations: int = 10
    seed: int | None = None  # None draws a seed in [0, 1000) at run time

    # === Diagnostics ===
    log_level: str = "info"  # 'debug', 'info', 'error'

    # === Time series ===
    # Snapshot every N ticks plus the final tick of each iteration
    snapshot_interval: int = 10

    def validate(self) -> None:
        """Raise ValueError for settings no run can use."""
        if not isinstance(self.iterations, int) or self.iterations < 1:
            raise ValueError(f"iterations must be a positive integer, got {self.iterations!r}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}"
            )
        if not isinstance(self.snapshot_interval, int) or self.snapshot_interval < 1:
            raise ValueError(
                f"snapshot_interval must be a positive integer, got {self.snapshot_interval!r}"
            )

    def resolved_seed(self) -> int:
        """The seed for one run; draws a fresh one per call when unset."""
        if self.seed is None:
            return int(np.random.default_rng().integers(0, 1000))
        return self.seed

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SimulationConfig:
        return cls(**{k: v for k, v in d.items() if not k.startswith("_")})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> SimulationConfig:
        return cls.from_dict(json.loads(s))

    def diff(self, other: SimulationConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
