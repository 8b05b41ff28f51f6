"""
Per-iteration simulation state.

A fresh ``SimulationState`` is built from the economy definition at the
start of every iteration and discarded once its statistics are folded in.
Nothing here is shared between iterations.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from ecopressure.core.model import ActorBehavior, EconomySystem


@dataclass
class ResourceState:
    amount: float
    max_amount: float
    regeneration_rate: float

    def set_amount(self, value: float) -> None:
        """Store ``value`` clamped into ``[0, max_amount]``."""
        self.amount = min(self.max_amount, max(0.0, value))


@dataclass
class ActorState:
    resources: dict[str, float]
    behavior: ActorBehavior

    def holding(self, resource_id: str) -> float:
        return self.resources.get(resource_id, 0.0)

    @property
    def total_wealth(self) -> float:
        return float(sum(self.resources.values()))


@dataclass
class TransactionState:
    """Execution bookkeeping plus the live copy of the rule's tunables."""
    probability: float
    cooldown: float
    resources: dict[str, float]
    last_executed: float = float("-inf")
    count: int = 0


@dataclass
class SimulationState:
    resources: dict[str, ResourceState] = field(default_factory=dict)
    actors: dict[str, ActorState] = field(default_factory=dict)
    transactions: dict[str, TransactionState] = field(default_factory=dict)
    time: int = 0

    def snapshot(self, iteration: int = 0) -> dict[str, Any]:
        """Deep, JSON-ready copy of the current state for the time series."""
        return {
            "iteration": iteration,
            "time": self.time,
            "resources": {
                rid: {
                    "amount": r.amount,
                    "maxAmount": r.max_amount,
                    "regenerationRate": r.regeneration_rate,
                }
                for rid, r in self.resources.items()
            },
            "actors": {
                aid: {
                    "resources": dict(a.resources),
                    "behavior": a.behavior.to_dict(),
                }
                for aid, a in self.actors.items()
            },
            "transactions": {
                tid: {
                    "lastExecuted": t.last_executed if t.count else None,
                    "count": t.count,
                }
                for tid, t in self.transactions.items()
            },
        }


def initialize_state(system: EconomySystem) -> SimulationState:
    """Build working copies of every resource, actor, and transaction."""
    state = SimulationState()

    for resource in system.resources:
        rs = ResourceState(
            amount=0.0,
            max_amount=resource.max_amount,
            regeneration_rate=resource.regeneration_rate,
        )
        rs.set_amount(resource.initial_amount)
        state.resources[resource.id] = rs

    for actor in system.actors:
        state.actors[actor.id] = ActorState(
            resources={rid: max(0.0, amount) for rid, amount in actor.resources.items()},
            behavior=copy.deepcopy(actor.behavior),
        )

    for transaction in system.transactions:
        state.transactions[transaction.id] = TransactionState(
            probability=transaction.probability,
            cooldown=transaction.cooldown,
            resources=dict(transaction.resources),
        )

    return state
