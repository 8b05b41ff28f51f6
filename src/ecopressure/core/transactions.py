"""
Transaction processing: conditional, probabilistic, cooldown-gated transfers.

Gates run in a fixed order per rule and tick: cooldown, one probability
draw, conditions, balance check. Only the probability gate and
``randomChance`` conditions consume random draws, so the draw sequence
depends on nothing but the seed and the state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from ecopressure.core.model import EconomySystem, Transaction, TransactionCondition
from ecopressure.core.state import ActorState, SimulationState

if TYPE_CHECKING:
    from ecopressure.core.engine import SimulationResult


def compare_values(a: float, b: float, operator: str) -> bool:
    """Evaluate ``a <operator> b``; unknown operators are false."""
    if operator == ">":
        return a > b
    if operator == "<":
        return a < b
    if operator == "==":
        return a == b
    if operator == ">=":
        return a >= b
    if operator == "<=":
        return a <= b
    return False


def check_condition(
    condition: TransactionCondition,
    state: SimulationState,
    rng: Callable[[], float],
) -> bool:
    if condition.type == "resourceAmount":
        resource = state.resources.get(condition.resource_id or "")
        if resource is None:
            return False
        return compare_values(resource.amount, condition.value, condition.operator)
    if condition.type == "timeElapsed":
        return compare_values(state.time, condition.value, condition.operator)
    if condition.type == "randomChance":
        return rng() < condition.value
    # actorState has no checks yet; unknown types do not block.
    return True


def check_conditions(
    transaction: Transaction,
    state: SimulationState,
    rng: Callable[[], float],
) -> bool:
    """All conditions must hold. Evaluation stops at the first failure."""
    return all(check_condition(c, state, rng) for c in transaction.conditions)


def can_afford(
    source: ActorState, target: ActorState, bundle: dict[str, float],
) -> bool:
    """Positive amounts are paid by the source, negative ones by the target."""
    for resource_id, amount in bundle.items():
        if amount > 0 and source.holding(resource_id) < amount:
            return False
        if amount < 0 and target.holding(resource_id) < -amount:
            return False
    return True


def execute_transfer(
    source: ActorState, target: ActorState, bundle: dict[str, float],
) -> None:
    for resource_id, amount in bundle.items():
        source.resources[resource_id] = source.holding(resource_id) - amount
        target.resources[resource_id] = target.holding(resource_id) + amount


def process_transactions(
    state: SimulationState,
    system: EconomySystem,
    time: int,
    rng: Callable[[], float],
    result: SimulationResult,
) -> int:
    """Run every transaction rule once, in definition order.

    Returns the number of transactions executed this tick.
    """
    executed = 0
    for transaction in system.transactions:
        rule = state.transactions.get(transaction.id)
        if rule is None:
            continue

        if time - rule.last_executed < rule.cooldown:
            continue
        if rng() > rule.probability:
            continue
        if not check_conditions(transaction, state, rng):
            continue

        source = state.actors.get(transaction.source_actor_id)
        target = state.actors.get(transaction.target_actor_id)
        if source is None or target is None:
            continue
        if not can_afford(source, target, rule.resources):
            continue

        execute_transfer(source, target, rule.resources)
        rule.last_executed = time
        rule.count += 1
        result.summary.record_transaction(
            transaction.id,
            transaction.source_actor_id,
            transaction.target_actor_id,
            rule.resources,
        )
        executed += 1

    return executed
