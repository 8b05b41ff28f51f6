"""
Statistics aggregation for simulation runs.

Per-iteration folding (``StatisticsAggregator.update``) tracks resource
extremes, final holdings and actor wealth; ``finalize`` turns the running
numbers into volatility, stability, inflation and a Gini inequality index.
Transaction counters are fed live by the transaction processor through
``SimulationSummary.record_transaction``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ecopressure.core.model import EconomySystem
from ecopressure.core.state import SimulationState


@dataclass
class ResourceStats:
    min: float = float("inf")
    max: float = float("-inf")
    average: float = 0.0
    final_amount: float = 0.0
    volatility: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "min": self.min,
            "max": self.max,
            "average": self.average,
            "finalAmount": self.final_amount,
            "volatility": self.volatility,
        }


@dataclass
class ActorStats:
    resource_growth: dict[str, float] = field(default_factory=dict)
    transaction_count: int = 0
    wealth_change: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceGrowth": dict(self.resource_growth),
            "transactionCount": self.transaction_count,
            "wealthChange": self.wealth_change,
        }


@dataclass
class TransactionStats:
    count: int = 0
    total_resources_exchanged: dict[str, float] = field(default_factory=dict)
    average_size: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "totalResourcesExchanged": dict(self.total_resources_exchanged),
            "averageSize": self.average_size,
        }


@dataclass
class SimulationSummary:
    """Aggregated outcome of all iterations, keyed by the system's ids."""

    resource_stats: dict[str, ResourceStats] = field(default_factory=dict)
    actor_stats: dict[str, ActorStats] = field(default_factory=dict)
    transaction_stats: dict[str, TransactionStats] = field(default_factory=dict)
    system_stability: float = 0.0
    inflation_rate: float = 0.0
    inequality_index: float = 0.0

    @classmethod
    def for_system(cls, system: EconomySystem) -> SimulationSummary:
        """Zeroed stats for every resource, actor, and transaction."""
        resource_ids = [r.id for r in system.resources]
        return cls(
            resource_stats={rid: ResourceStats() for rid in resource_ids},
            actor_stats={
                a.id: ActorStats(resource_growth={rid: 0.0 for rid in resource_ids})
                for a in system.actors
            },
            transaction_stats={
                t.id: TransactionStats(
                    total_resources_exchanged={rid: 0.0 for rid in resource_ids},
                )
                for t in system.transactions
            },
        )

    def record_transaction(
        self,
        transaction_id: str,
        source_actor_id: str,
        target_actor_id: str,
        bundle: dict[str, float],
    ) -> None:
        """Count one executed transaction and the resources it moved."""
        stats = self.transaction_stats.get(transaction_id)
        if stats is not None:
            stats.count += 1
            totals = stats.total_resources_exchanged
            for resource_id, amount in bundle.items():
                totals[resource_id] = totals.get(resource_id, 0.0) + amount

        for actor_id in (source_actor_id, target_actor_id):
            actor = self.actor_stats.get(actor_id)
            if actor is not None:
                actor.transaction_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceStats": {k: v.to_dict() for k, v in self.resource_stats.items()},
            "actorStats": {k: v.to_dict() for k, v in self.actor_stats.items()},
            "transactionStats": {
                k: v.to_dict() for k, v in self.transaction_stats.items()
            },
            "systemStability": self.system_stability,
            "inflationRate": self.inflation_rate,
            "inequalityIndex": self.inequality_index,
        }


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
def calculate_gini_coefficient(values: list[float]) -> float:
    """Gini coefficient via the mean absolute difference.

    Negative values are treated as zero. Returns 0 for an empty input, a
    single value, or an all-zero distribution.
    """
    if len(values) == 0:
        return 0.0
    v = np.maximum(np.asarray(values, dtype=float), 0.0)
    total = v.sum()
    if total == 0:
        return 0.0
    diffs = np.abs(v[:, None] - v[None, :]).sum()
    return float(diffs / (2 * len(v) * total))


def calculate_inflation_rate(time_series: list[dict[str, Any]]) -> float:
    """Mean relative change of pool amounts between first and last snapshot.

    Only resources with a positive initial amount take part.
    """
    if len(time_series) < 2:
        return 0.0
    first = time_series[0]["resources"]
    last = time_series[-1]["resources"]

    changes = []
    for resource_id, initial in first.items():
        initial_amount = initial["amount"]
        if initial_amount <= 0 or resource_id not in last:
            continue
        changes.append(last[resource_id]["amount"] / initial_amount - 1)

    return float(np.mean(changes)) if changes else 0.0


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------
class StatisticsAggregator:
    """Folds finished iterations into a ``SimulationSummary``."""

    def __init__(self, system: EconomySystem, summary: SimulationSummary | None = None):
        self.system = system
        self.summary = summary or SimulationSummary.for_system(system)
        self.iterations_folded = 0

    def update(self, state: SimulationState) -> None:
        """Fold the end-of-iteration state into the running stats."""
        for resource_id, rs in state.resources.items():
            stats = self.summary.resource_stats.get(resource_id)
            if stats is None:
                continue
            stats.min = min(stats.min, rs.amount)
            stats.max = max(stats.max, rs.amount)
            stats.final_amount = rs.amount

        for actor in self.system.actors:
            actor_state = state.actors.get(actor.id)
            stats = self.summary.actor_stats.get(actor.id)
            if actor_state is None or stats is None:
                continue
            stats.wealth_change = actor_state.total_wealth
            for resource in self.system.resources:
                stats.resource_growth[resource.id] = (
                    actor_state.holding(resource.id)
                    - max(0.0, actor.resources.get(resource.id, 0.0))
                )

        self.iterations_folded += 1

    def finalize(self, time_series: list[dict[str, Any]]) -> SimulationSummary:
        """Compute derived statistics once every iteration has been folded."""
        summary = self.summary

        for stats in summary.resource_stats.values():
            if stats.min == float("inf"):
                stats.min = 0.0
            if stats.max == float("-inf"):
                stats.max = 0.0
            stats.average = (stats.min + stats.max) / 2
            stats.volatility = (
                (stats.max - stats.min) / stats.average if stats.average > 0 else 0.0
            )

        for stats in summary.transaction_stats.values():
            if stats.count > 0:
                total_size = sum(stats.total_resources_exchanged.values())
                stats.average_size = total_size / stats.count

        volatilities = [s.volatility for s in summary.resource_stats.values()]
        total_volatility = sum(volatilities)
        if volatilities and total_volatility > 0:
            summary.system_stability = 1 / (total_volatility / len(volatilities))
        else:
            summary.system_stability = 1.0

        summary.inflation_rate = calculate_inflation_rate(time_series)

        wealth = [s.wealth_change for s in summary.actor_stats.values()]
        summary.inequality_index = (
            calculate_gini_coefficient(wealth) if len(wealth) > 1 else 0.0
        )
        return summary
