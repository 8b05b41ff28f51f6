"""
Economy definitions: systems, scenarios, and their boundary validation.

Editors produce loosely-shaped camelCase dicts. They are parsed here, once,
into dataclasses. Structural problems (no id, missing arrays) raise
``DefinitionError``; bad values inside the arrays fall back to safe
defaults so that malformed author data never crashes a run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

ACTOR_TYPES = ("player", "npc", "system")
TRADING_STRATEGIES = ("aggressive", "balanced", "conservative")
CONDITION_TYPES = ("resourceAmount", "actorState", "timeElapsed", "randomChance")
OPERATORS = (">", "<", "==", ">=", "<=")

DEFAULT_MAX_AMOUNT = 1000.0


class DefinitionError(ValueError):
    """Raised when a system or scenario does not have the required shape."""


class EventType(Enum):
    RESOURCE_SHOCK = "resource_shock"
    ACTOR_BEHAVIOR_CHANGE = "actor_behavior_change"
    TRANSACTION_CHANGE = "transaction_change"


class BehaviorKind(Enum):
    TRADING_STRATEGY = "tradingStrategy"
    CONSUMPTION_RATE = "consumptionRate"
    PRODUCTION_RATE = "productionRate"


class TransactionChangeKind(Enum):
    PROBABILITY = "probability"
    COOLDOWN = "cooldown"
    RESOURCE_AMOUNT = "resourceAmount"


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------
def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _number(value: Any, default: float) -> float:
    return float(value) if _is_number(value) else default


def _optional_number(value: Any) -> float | None:
    return float(value) if _is_number(value) else None


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _amount_map(value: Any) -> dict[str, float]:
    """Keep only string keys with numeric values."""
    if not isinstance(value, dict):
        return {}
    return {
        str(k): float(v) for k, v in value.items()
        if _is_number(v)
    }


def _rate_map(value: Any) -> dict[str, float]:
    """Per-tick rates; negative rates are floored at 0."""
    return {k: max(0.0, v) for k, v in _amount_map(value).items()}


def _enum_or_none(enum_cls: type[Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _require_mapping(raw: Any, what: str) -> dict[str, Any]:
    if raw is None:
        raise DefinitionError(f"{what} is missing")
    if not isinstance(raw, dict):
        raise DefinitionError(f"{what} must be an object, got {type(raw).__name__}")
    return raw


def _require_identity(raw: dict[str, Any], what: str) -> None:
    if not raw.get("id") or not raw.get("name"):
        raise DefinitionError(f"{what} is incomplete: 'id' and 'name' are required")


def _require_list(raw: dict[str, Any], key: str, what: str) -> list[Any]:
    value = raw.get(key)
    if not isinstance(value, list):
        raise DefinitionError(f"{what} is incomplete: '{key}' must be a list")
    return value


# ---------------------------------------------------------------------------
# Economy system
# ---------------------------------------------------------------------------
@dataclass
class Resource:
    id: str
    name: str = ""
    initial_amount: float = 0.0
    regeneration_rate: float = 0.0
    max_amount: float = DEFAULT_MAX_AMOUNT
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Resource:
        return cls(
            id=str(d["id"]),
            name=_text(d.get("name")),
            initial_amount=_number(d.get("initialAmount"), 0.0),
            regeneration_rate=_number(d.get("regenerationRate"), 0.0),
            max_amount=max(0.0, _number(d.get("maxAmount"), DEFAULT_MAX_AMOUNT)),
            description=_text(d.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "initialAmount": self.initial_amount,
            "regenerationRate": self.regeneration_rate,
            "maxAmount": self.max_amount,
            "description": self.description,
        }


@dataclass
class ActorBehavior:
    consumption_rate: dict[str, float] = field(default_factory=dict)
    production_rate: dict[str, float] = field(default_factory=dict)
    trading_strategy: str = "balanced"
    priority_resources: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> ActorBehavior:
        if not isinstance(d, dict):
            return cls()
        strategy = d.get("tradingStrategy")
        priorities = d.get("priorityResources")
        return cls(
            consumption_rate=_rate_map(d.get("consumptionRate")),
            production_rate=_rate_map(d.get("productionRate")),
            trading_strategy=strategy if strategy in TRADING_STRATEGIES else "balanced",
            priority_resources=(
                [str(p) for p in priorities] if isinstance(priorities, list) else []
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "consumptionRate": dict(self.consumption_rate),
            "productionRate": dict(self.production_rate),
            "tradingStrategy": self.trading_strategy,
            "priorityResources": list(self.priority_resources),
        }


@dataclass
class Actor:
    id: str
    name: str = ""
    type: str = "npc"
    resources: dict[str, float] = field(default_factory=dict)
    behavior: ActorBehavior = field(default_factory=ActorBehavior)
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Actor:
        actor_type = d.get("type")
        return cls(
            id=str(d["id"]),
            name=_text(d.get("name")),
            type=actor_type if actor_type in ACTOR_TYPES else "npc",
            resources=_amount_map(d.get("resources")),
            behavior=ActorBehavior.from_dict(d.get("behavior")),
            description=_text(d.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "resources": dict(self.resources),
            "behavior": self.behavior.to_dict(),
            "description": self.description,
        }


@dataclass
class TransactionCondition:
    type: str
    operator: str = ">"
    value: float = 0.0
    resource_id: str | None = None

    @classmethod
    def from_dict(cls, d: Any) -> TransactionCondition | None:
        if not isinstance(d, dict) or not isinstance(d.get("type"), str):
            return None
        resource_id = d.get("resourceId")
        return cls(
            type=d["type"],
            operator=_text(d.get("operator"), ">"),
            value=_number(d.get("value"), 0.0),
            resource_id=str(resource_id) if resource_id else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "type": self.type,
            "operator": self.operator,
            "value": self.value,
        }
        if self.resource_id is not None:
            d["resourceId"] = self.resource_id
        return d


@dataclass
class Transaction:
    id: str
    name: str = ""
    source_actor_id: str = ""
    target_actor_id: str = ""
    resources: dict[str, float] = field(default_factory=dict)
    conditions: list[TransactionCondition] = field(default_factory=list)
    probability: float = 1.0
    cooldown: float = 0.0
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Transaction:
        raw_conditions = d.get("conditions")
        conditions = []
        if isinstance(raw_conditions, list):
            for c in raw_conditions:
                condition = TransactionCondition.from_dict(c)
                if condition is not None:
                    conditions.append(condition)
        return cls(
            id=str(d["id"]),
            name=_text(d.get("name")),
            source_actor_id=str(d.get("sourceActorId") or ""),
            target_actor_id=str(d.get("targetActorId") or ""),
            resources=_amount_map(d.get("resources")),
            conditions=conditions,
            probability=_number(d.get("probability"), 1.0),
            cooldown=_number(d.get("cooldown"), 0.0),
            description=_text(d.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sourceActorId": self.source_actor_id,
            "targetActorId": self.target_actor_id,
            "resources": dict(self.resources),
            "conditions": [c.to_dict() for c in self.conditions],
            "probability": self.probability,
            "cooldown": self.cooldown,
            "description": self.description,
        }


def _parse_items(raw_items: list[Any], parser: Any) -> list[Any]:
    """Parse list entries, dropping anything that is not an object with an id."""
    items = []
    for item in raw_items:
        if isinstance(item, dict) and item.get("id"):
            items.append(parser(item))
    return items


@dataclass
class EconomySystem:
    """Static economy definition: resources, actors, and transaction rules."""

    id: str
    name: str
    resources: list[Resource] = field(default_factory=list)
    actors: list[Actor] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> EconomySystem:
        d = _require_mapping(raw, "Economy system")
        _require_identity(d, "Economy system")
        resources = _require_list(d, "resources", "Economy system")
        actors = _require_list(d, "actors", "Economy system")
        transactions = _require_list(d, "transactions", "Economy system")
        return cls(
            id=str(d["id"]),
            name=str(d["name"]),
            resources=_parse_items(resources, Resource.from_dict),
            actors=_parse_items(actors, Actor.from_dict),
            transactions=_parse_items(transactions, Transaction.from_dict),
            description=_text(d.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "resources": [r.to_dict() for r in self.resources],
            "actors": [a.to_dict() for a in self.actors],
            "transactions": [t.to_dict() for t in self.transactions],
        }

    def resource(self, resource_id: str) -> Resource | None:
        return next((r for r in self.resources if r.id == resource_id), None)

    def actor(self, actor_id: str) -> Actor | None:
        return next((a for a in self.actors if a.id == actor_id), None)

    def transaction(self, transaction_id: str) -> Transaction | None:
        return next((t for t in self.transactions if t.id == transaction_id), None)


# ---------------------------------------------------------------------------
# Scenario events: a closed set of payloads keyed by event type
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceShock:
    resource_id: str | None
    change_percent: float = 0.0


@dataclass(frozen=True)
class BehaviorChange:
    actor_id: str | None
    behavior_type: BehaviorKind | None
    change_percent: float = 0.0
    new_value: Any = None


@dataclass(frozen=True)
class TransactionChange:
    transaction_id: str | None
    change_type: TransactionChangeKind | None
    new_value: float | None = None
    resource_id: str | None = None


EventPayload = Union[ResourceShock, BehaviorChange, TransactionChange]


def _optional_id(value: Any) -> str | None:
    return str(value) if value else None


def parse_event_payload(event_type: EventType, data: dict[str, Any]) -> EventPayload:
    """Build the typed payload for one event type."""
    if event_type is EventType.RESOURCE_SHOCK:
        return ResourceShock(
            resource_id=_optional_id(data.get("resourceId")),
            change_percent=_number(data.get("changePercent"), 0.0),
        )
    if event_type is EventType.ACTOR_BEHAVIOR_CHANGE:
        return BehaviorChange(
            actor_id=_optional_id(data.get("actorId")),
            behavior_type=_enum_or_none(BehaviorKind, data.get("behaviorType")),
            change_percent=_number(data.get("changePercent"), 0.0),
            new_value=data.get("newValue"),
        )
    return TransactionChange(
        transaction_id=_optional_id(data.get("transactionId")),
        change_type=_enum_or_none(TransactionChangeKind, data.get("changeType")),
        new_value=_optional_number(data.get("newValue")),
        resource_id=_optional_id(data.get("resourceId")),
    )


@dataclass
class ScenarioEvent:
    """A scheduled shock. ``payload`` is None when the raw event is malformed."""

    id: str
    trigger_time: float | None
    type: str | None
    data: dict[str, Any]
    description: str = ""
    payload: EventPayload | None = None
    invalid_reason: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.payload is not None

    @classmethod
    def from_dict(cls, d: Any, index: int = 0) -> ScenarioEvent:
        if not isinstance(d, dict):
            return cls(
                id=f"event_{index}", trigger_time=None, type=None, data={},
                invalid_reason="event is not an object",
            )

        raw_type = d.get("type")
        raw_data = d.get("data")
        event = cls(
            id=str(d.get("id") or f"event_{index}"),
            trigger_time=_optional_number(d.get("triggerTime")),
            type=raw_type if isinstance(raw_type, str) else None,
            data=dict(raw_data) if isinstance(raw_data, dict) else {},
            description=_text(d.get("description")),
        )

        event_type = _enum_or_none(EventType, raw_type)
        if not raw_type or event_type is None:
            event.invalid_reason = f"unknown event type {raw_type!r}"
        elif not isinstance(raw_data, dict):
            event.invalid_reason = "event data is missing"
        else:
            event.payload = parse_event_payload(event_type, raw_data)
        return event

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "triggerTime": self.trigger_time,
            "type": self.type,
            "data": dict(self.data),
        }


@dataclass
class SimulationScenario:
    """A time-bounded script of events applied to one economy system."""

    id: str
    name: str
    economy_system_id: str
    duration: int
    events: list[ScenarioEvent] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> SimulationScenario:
        d = _require_mapping(raw, "Simulation scenario")
        _require_identity(d, "Simulation scenario")
        duration = d.get("duration")
        if not _is_number(duration) or duration < 1:
            raise DefinitionError(
                "Simulation scenario is incomplete: 'duration' must be a positive number"
            )
        events = _require_list(d, "events", "Simulation scenario")
        return cls(
            id=str(d["id"]),
            name=str(d["name"]),
            economy_system_id=str(d.get("economySystemId") or ""),
            duration=int(duration),
            events=[ScenarioEvent.from_dict(e, i) for i, e in enumerate(events)],
            description=_text(d.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "economySystemId": self.economy_system_id,
            "duration": self.duration,
            "events": [e.to_dict() for e in self.events],
            "description": self.description,
        }

    def events_at(self, time: int) -> list[ScenarioEvent]:
        """Events due at ``time``, in authored order."""
        return [
            e for e in self.events
            if e.trigger_time is not None and e.trigger_time == time
        ]
