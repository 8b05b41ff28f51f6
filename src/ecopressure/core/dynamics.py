"""
Fixed per-tick flows: pool regeneration and actor consumption/production.
"""

from __future__ import annotations

from typing import Callable

from ecopressure.core.model import EconomySystem
from ecopressure.core.state import SimulationState


def update_resources(state: SimulationState, system: EconomySystem) -> None:
    """Regrow every pool resource by its rate, capped at its maximum."""
    for resource in system.resources:
        rs = state.resources.get(resource.id)
        if rs is None or rs.regeneration_rate <= 0:
            continue
        if rs.amount < rs.max_amount:
            rs.set_amount(rs.amount + rs.regeneration_rate)


def process_actor_behaviors(
    state: SimulationState,
    system: EconomySystem,
    time: int,
    rng: Callable[[], float] | None = None,
) -> None:
    """Consume then produce for every actor.

    Only resources defined by the system are touched. Consumption never
    takes a holding below zero; production is uncapped at the actor level.
    """
    for actor in system.actors:
        actor_state = state.actors.get(actor.id)
        if actor_state is None:
            continue
        holdings = actor_state.resources
        behavior = actor_state.behavior

        for resource_id, rate in behavior.consumption_rate.items():
            if resource_id not in state.resources:
                continue
            available = holdings.get(resource_id, 0.0)
            if available <= 0:
                continue
            holdings[resource_id] = available - min(max(0.0, rate), available)

        for resource_id, rate in behavior.production_rate.items():
            if resource_id not in state.resources:
                continue
            holdings[resource_id] = holdings.get(resource_id, 0.0) + max(0.0, rate)
