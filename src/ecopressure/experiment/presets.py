"""
Authoring templates and sample economies.

The ``blank_*`` helpers return the same starting shapes the editors create
for a new object. The named presets are small, complete economies used for
demos and as fixtures for comparative experiments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable
from uuid import uuid4

from ecopressure.core.model import EconomySystem, SimulationScenario


def _new_id() -> str:
    return uuid4().hex[:8]


# ---------------------------------------------------------------------------
# Blank templates (camelCase authoring dicts)
# ---------------------------------------------------------------------------
def blank_system(name: str = "New economy system") -> dict[str, Any]:
    return {
        "id": _new_id(),
        "name": name,
        "description": "",
        "resources": [],
        "actors": [],
        "transactions": [],
    }


def blank_resource(name: str = "New resource") -> dict[str, Any]:
    return {
        "id": _new_id(),
        "name": name,
        "initialAmount": 100,
        "regenerationRate": 0,
        "maxAmount": 1000,
        "description": "",
    }


def blank_actor(name: str = "New actor") -> dict[str, Any]:
    return {
        "id": _new_id(),
        "name": name,
        "type": "npc",
        "resources": {},
        "behavior": {
            "consumptionRate": {},
            "productionRate": {},
            "tradingStrategy": "balanced",
            "priorityResources": [],
        },
        "description": "",
    }


def blank_transaction(
    system: dict[str, Any] | None = None, name: str = "New transaction rule",
) -> dict[str, Any]:
    """A rule from the first actor to the second (or to itself if alone)."""
    actors = (system or {}).get("actors") or []
    source = actors[0]["id"] if actors else ""
    target = actors[1]["id"] if len(actors) > 1 else source
    return {
        "id": _new_id(),
        "name": name,
        "sourceActorId": source,
        "targetActorId": target,
        "resources": {},
        "conditions": [],
        "probability": 0.5,
        "cooldown": 10,
        "description": "",
    }


def blank_scenario(system_id: str, name: str = "New scenario") -> dict[str, Any]:
    """One simulated year with no events."""
    return {
        "id": _new_id(),
        "name": name,
        "economySystemId": system_id,
        "duration": 365,
        "events": [],
        "description": "",
    }


def blank_event(duration: int = 365) -> dict[str, Any]:
    """A resource shock placed halfway through the scenario."""
    return {
        "id": _new_id(),
        "description": "New economic shock",
        "triggerTime": duration // 2,
        "type": "resource_shock",
        "data": {},
    }


# ---------------------------------------------------------------------------
# Sample economies
# ---------------------------------------------------------------------------
@dataclass
class EconomyPreset:
    name: str
    description: str
    system: EconomySystem
    scenario: SimulationScenario

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "system": self.system.to_dict(),
            "scenario": self.scenario.to_dict(),
        }


def _actor(
    actor_id: str, name: str, actor_type: str, holdings: dict[str, float],
    consumption: dict[str, float] | None = None,
    production: dict[str, float] | None = None,
    strategy: str = "balanced",
) -> dict[str, Any]:
    return {
        "id": actor_id,
        "name": name,
        "type": actor_type,
        "resources": holdings,
        "behavior": {
            "consumptionRate": consumption or {},
            "productionRate": production or {},
            "tradingStrategy": strategy,
            "priorityResources": list(holdings),
        },
    }


def closed_market() -> EconomyPreset:
    """Two traders swapping gold for ore with a mid-run ore crash."""
    system = {
        "id": "closed_market",
        "name": "Closed market",
        "resources": [
            {"id": "gold", "name": "Gold", "initialAmount": 1000,
             "regenerationRate": 0, "maxAmount": 5000},
            {"id": "ore", "name": "Ore", "initialAmount": 400,
             "regenerationRate": 4, "maxAmount": 800},
        ],
        "actors": [
            _actor("miner", "Miner", "player", {"gold": 50, "ore": 80},
                   consumption={"gold": 1}, production={"ore": 3}),
            _actor("smith", "Smith", "npc", {"gold": 400, "ore": 10},
                   consumption={"ore": 2}, production={"gold": 1}),
        ],
        "transactions": [
            {"id": "sell_ore", "name": "Miner sells ore", "sourceActorId": "miner",
             "targetActorId": "smith", "resources": {"ore": 10},
             "conditions": [], "probability": 0.7, "cooldown": 2},
            {"id": "pay_gold", "name": "Smith pays gold", "sourceActorId": "smith",
             "targetActorId": "miner", "resources": {"gold": 15},
             "conditions": [{"type": "resourceAmount", "resourceId": "ore",
                             "operator": ">", "value": 100}],
             "probability": 0.7, "cooldown": 2},
        ],
    }
    scenario = {
        "id": "closed_market_crash",
        "name": "Ore crash",
        "economySystemId": "closed_market",
        "duration": 100,
        "events": [
            {"id": "crash", "description": "Mine collapse", "triggerTime": 50,
             "type": "resource_shock",
             "data": {"resourceId": "ore", "changePercent": -60}},
        ],
    }
    return EconomyPreset(
        name="closed_market",
        description=closed_market.__doc__ or "",
        system=EconomySystem.from_dict(system),
        scenario=SimulationScenario.from_dict(scenario),
    )


def gold_rush() -> EconomyPreset:
    """A gold windfall followed by a production boom."""
    system = {
        "id": "gold_rush",
        "name": "Gold rush",
        "resources": [
            {"id": "gold", "name": "Gold", "initialAmount": 200,
             "regenerationRate": 2, "maxAmount": 2000},
            {"id": "food", "name": "Food", "initialAmount": 500,
             "regenerationRate": 10, "maxAmount": 1000},
        ],
        "actors": [
            _actor("prospector", "Prospector", "player", {"gold": 10, "food": 30},
                   consumption={"food": 2}, production={"gold": 1},
                   strategy="aggressive"),
            _actor("farmer", "Farmer", "npc", {"gold": 20, "food": 100},
                   consumption={"food": 1}, production={"food": 4},
                   strategy="conservative"),
        ],
        "transactions": [
            {"id": "buy_food", "name": "Prospector buys food",
             "sourceActorId": "prospector", "targetActorId": "farmer",
             "resources": {"gold": 2, "food": -10}, "conditions": [],
             "probability": 0.8, "cooldown": 3},
        ],
    }
    scenario = {
        "id": "gold_rush_boom",
        "name": "Boom and bust",
        "economySystemId": "gold_rush",
        "duration": 120,
        "events": [
            {"id": "strike", "description": "Mother lode", "triggerTime": 20,
             "type": "resource_shock",
             "data": {"resourceId": "gold", "changePercent": 200}},
            {"id": "boom", "description": "Prospectors flood in", "triggerTime": 30,
             "type": "actor_behavior_change",
             "data": {"actorId": "prospector", "behaviorType": "productionRate",
                      "changePercent": 100}},
            {"id": "bust", "description": "Veins run dry", "triggerTime": 90,
             "type": "resource_shock",
             "data": {"resourceId": "gold", "changePercent": -80}},
        ],
    }
    return EconomyPreset(
        name="gold_rush",
        description=gold_rush.__doc__ or "",
        system=EconomySystem.from_dict(system),
        scenario=SimulationScenario.from_dict(scenario),
    )


def taxed_economy() -> EconomyPreset:
    """A treasury taxing two players, with a tax hike late in the run."""
    system = {
        "id": "taxed_economy",
        "name": "Taxed economy",
        "resources": [
            {"id": "coin", "name": "Coin", "initialAmount": 1000,
             "regenerationRate": 5, "maxAmount": 3000},
        ],
        "actors": [
            _actor("rich", "Rich player", "player", {"coin": 500},
                   production={"coin": 5}),
            _actor("poor", "Poor player", "player", {"coin": 50},
                   production={"coin": 1}),
            _actor("treasury", "Treasury", "system", {"coin": 0}),
        ],
        "transactions": [
            {"id": "tax_rich", "name": "Tax the rich", "sourceActorId": "rich",
             "targetActorId": "treasury", "resources": {"coin": 20},
             "conditions": [], "probability": 0.5, "cooldown": 5},
            {"id": "relief", "name": "Poverty relief", "sourceActorId": "treasury",
             "targetActorId": "poor", "resources": {"coin": 10},
             "conditions": [{"type": "timeElapsed", "operator": ">=", "value": 10}],
             "probability": 1.0, "cooldown": 5},
        ],
    }
    scenario = {
        "id": "taxed_economy_hike",
        "name": "Tax hike",
        "economySystemId": "taxed_economy",
        "duration": 100,
        "events": [
            {"id": "hike", "description": "Tax collected every tick",
             "triggerTime": 60, "type": "transaction_change",
             "data": {"transactionId": "tax_rich", "changeType": "cooldown",
                      "newValue": 1}},
        ],
    }
    return EconomyPreset(
        name="taxed_economy",
        description=taxed_economy.__doc__ or "",
        system=EconomySystem.from_dict(system),
        scenario=SimulationScenario.from_dict(scenario),
    )


PRESETS: dict[str, Callable[[], EconomyPreset]] = {
    "closed_market": closed_market,
    "gold_rush": gold_rush,
    "taxed_economy": taxed_economy,
}


def get_preset(name: str) -> EconomyPreset:
    """Get a sample economy by name."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]()


def list_presets() -> list[str]:
    """List all available preset names."""
    return list(PRESETS.keys())
