"""
Scenario event application.

Each event kind has its own typed update function. ``apply_event`` validates
the event against the live state before mutating anything, so an
``EventError`` always leaves the state untouched and the event unrecorded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ecopressure.core.model import (
    TRADING_STRATEGIES,
    BehaviorChange,
    BehaviorKind,
    ResourceShock,
    ScenarioEvent,
    TransactionChange,
    TransactionChangeKind,
)
from ecopressure.core.state import ActorState, SimulationState, TransactionState

if TYPE_CHECKING:
    from ecopressure.core.engine import SimulationResult
    from ecopressure.core.runlog import RunLog

UNNAMED_EVENT = "Unnamed event"


class EventError(ValueError):
    """An event that cannot be applied; the run skips it and continues."""


def _scale(value: float, change_percent: float) -> float:
    return max(0.0, value * (1 + change_percent / 100))


# ---------------------------------------------------------------------------
# Typed updates
# ---------------------------------------------------------------------------
def apply_resource_shock(state: SimulationState, shock: ResourceShock) -> tuple[float, float]:
    """Scale a pool resource by ``changePercent``. Returns (before, after)."""
    resource = state.resources.get(shock.resource_id or "")
    if resource is None:
        raise EventError(f"resource shock references unknown resource {shock.resource_id!r}")
    before = resource.amount
    resource.set_amount(_scale(before, shock.change_percent))
    return before, resource.amount


def set_trading_strategy(actor: ActorState, strategy: object) -> None:
    if strategy not in TRADING_STRATEGIES:
        raise EventError(f"unknown trading strategy {strategy!r}")
    actor.behavior.trading_strategy = str(strategy)


def scale_consumption(actor: ActorState, change_percent: float) -> None:
    rates = actor.behavior.consumption_rate
    for resource_id in rates:
        rates[resource_id] = _scale(rates[resource_id], change_percent)


def scale_production(actor: ActorState, change_percent: float) -> None:
    rates = actor.behavior.production_rate
    for resource_id in rates:
        rates[resource_id] = _scale(rates[resource_id], change_percent)


def apply_behavior_change(state: SimulationState, change: BehaviorChange) -> str:
    """Apply an actor behavior change. Returns a short description for the log."""
    actor = state.actors.get(change.actor_id or "")
    if actor is None:
        raise EventError(f"behavior change references unknown actor {change.actor_id!r}")

    if change.behavior_type is BehaviorKind.TRADING_STRATEGY:
        set_trading_strategy(actor, change.new_value)
        return f"{change.actor_id} trading strategy is now {change.new_value}"
    if change.behavior_type is BehaviorKind.CONSUMPTION_RATE:
        scale_consumption(actor, change.change_percent)
        return f"{change.actor_id} consumption rate changed {change.change_percent}%"
    if change.behavior_type is BehaviorKind.PRODUCTION_RATE:
        scale_production(actor, change.change_percent)
        return f"{change.actor_id} production rate changed {change.change_percent}%"
    raise EventError("behavior change has no recognised behaviorType")


def apply_transaction_change(state: SimulationState, change: TransactionChange) -> str:
    """Retune a transaction rule for the rest of the current iteration."""
    rule: TransactionState | None = state.transactions.get(change.transaction_id or "")
    if rule is None:
        raise EventError(
            f"transaction change references unknown transaction {change.transaction_id!r}"
        )
    if change.new_value is None:
        raise EventError("transaction change has no numeric newValue")

    if change.change_type is TransactionChangeKind.PROBABILITY:
        rule.probability = min(1.0, max(0.0, change.new_value))
        return f"{change.transaction_id} probability is now {rule.probability}"
    if change.change_type is TransactionChangeKind.COOLDOWN:
        rule.cooldown = max(0.0, change.new_value)
        return f"{change.transaction_id} cooldown is now {rule.cooldown}"
    if change.change_type is TransactionChangeKind.RESOURCE_AMOUNT:
        if not change.resource_id:
            raise EventError("resourceAmount change requires a resourceId")
        rule.resources[change.resource_id] = change.new_value
        return (
            f"{change.transaction_id} moves {change.new_value} "
            f"{change.resource_id} per execution"
        )
    raise EventError("transaction change has no recognised changeType")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def apply_event(
    state: SimulationState,
    event: ScenarioEvent,
    time: int,
    result: SimulationResult,
    log: RunLog | None = None,
    iteration: int = 0,
) -> None:
    """Apply one due event and append it to ``result.events``."""
    if not event.is_valid:
        raise EventError(f"invalid event at time {time}: {event.invalid_reason}")

    description = event.description or UNNAMED_EVENT
    payload = event.payload

    if isinstance(payload, ResourceShock):
        before, after = apply_resource_shock(state, payload)
        detail = f"{payload.resource_id} went from {before} to {after}"
    elif isinstance(payload, BehaviorChange):
        detail = apply_behavior_change(state, payload)
    elif isinstance(payload, TransactionChange):
        detail = apply_transaction_change(state, payload)
    else:
        raise EventError(f"unsupported event payload {type(payload).__name__}")

    result.events.append({
        "iteration": iteration,
        "time": time,
        "type": event.type,
        "description": description,
        "data": dict(event.data),
    })
    if log is not None:
        log.info(f"Applied event: {description} (time {time})")
        log.debug(detail)
