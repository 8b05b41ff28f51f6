"""
Shared test fixtures.

Economies are built as the camelCase dicts the editors produce, so every
test also goes through boundary validation.
"""

import pytest

from ecopressure.core.engine import SimulationResult
from ecopressure.core.model import EconomySystem, SimulationScenario
from ecopressure.metrics.statistics import SimulationSummary


def _trade_system(probability=1.0, cooldown=0, bundle=None, conditions=None):
    return {
        "id": "trade",
        "name": "Trade",
        "resources": [
            {"id": "gold", "name": "Gold", "initialAmount": 100,
             "regenerationRate": 0, "maxAmount": 1000},
        ],
        "actors": [
            {"id": "a", "name": "A", "type": "player", "resources": {"gold": 20}},
            {"id": "b", "name": "B", "type": "npc", "resources": {"gold": 0}},
        ],
        "transactions": [
            {"id": "pay", "name": "A pays B", "sourceActorId": "a",
             "targetActorId": "b", "resources": bundle or {"gold": 10},
             "conditions": conditions or [], "probability": probability,
             "cooldown": cooldown},
        ],
    }


def _scenario(system_id="trade", duration=3, events=None):
    return {
        "id": "scn",
        "name": "Scenario",
        "economySystemId": system_id,
        "duration": duration,
        "events": events or [],
    }


@pytest.fixture
def trade_system_dict():
    """Factory for the two-actor gold economy."""
    return _trade_system


@pytest.fixture
def scenario_dict():
    """Factory for a scenario dict."""
    return _scenario


@pytest.fixture
def trade_system():
    return EconomySystem.from_dict(_trade_system())


@pytest.fixture
def static_system():
    """One capped resource held entirely by one actor; nothing moves."""
    return EconomySystem.from_dict({
        "id": "static",
        "name": "Static",
        "resources": [
            {"id": "ore", "name": "Ore", "initialAmount": 100,
             "regenerationRate": 0, "maxAmount": 100},
        ],
        "actors": [
            {"id": "owner", "name": "Owner", "resources": {"ore": 100}},
        ],
        "transactions": [],
    })


@pytest.fixture
def market_system():
    """Two resources, regeneration, consumption, production and trade."""
    return EconomySystem.from_dict({
        "id": "market",
        "name": "Market",
        "resources": [
            {"id": "gold", "name": "Gold", "initialAmount": 500,
             "regenerationRate": 5, "maxAmount": 1000},
            {"id": "ore", "name": "Ore", "initialAmount": 300,
             "regenerationRate": 3, "maxAmount": 400},
        ],
        "actors": [
            {"id": "miner", "name": "Miner", "resources": {"gold": 50, "ore": 40},
             "behavior": {"consumptionRate": {"gold": 1},
                          "productionRate": {"ore": 2}}},
            {"id": "smith", "name": "Smith", "resources": {"gold": 200, "ore": 5},
             "behavior": {"consumptionRate": {"ore": 1},
                          "productionRate": {"gold": 1}}},
        ],
        "transactions": [
            {"id": "sell_ore", "name": "Sell ore", "sourceActorId": "miner",
             "targetActorId": "smith", "resources": {"ore": 5},
             "conditions": [], "probability": 0.6, "cooldown": 2},
            {"id": "pay_gold", "name": "Pay gold", "sourceActorId": "smith",
             "targetActorId": "miner", "resources": {"gold": 8},
             "conditions": [{"type": "randomChance", "operator": "<", "value": 0.5}],
             "probability": 0.9, "cooldown": 3},
        ],
    })


@pytest.fixture
def market_scenario():
    return SimulationScenario.from_dict({
        "id": "market_shock",
        "name": "Market shock",
        "economySystemId": "market",
        "duration": 40,
        "events": [
            {"id": "crash", "description": "Ore crash", "triggerTime": 15,
             "type": "resource_shock",
             "data": {"resourceId": "ore", "changePercent": -70}},
            {"id": "boom", "description": "Smith works harder", "triggerTime": 20,
             "type": "actor_behavior_change",
             "data": {"actorId": "smith", "behaviorType": "productionRate",
                      "changePercent": 50}},
        ],
    })


@pytest.fixture
def empty_result():
    """Factory for a bare result that events and transactions can write to."""
    def _make(system=None):
        summary = (
            SimulationSummary.for_system(system) if system is not None
            else SimulationSummary()
        )
        return SimulationResult(
            id="r1", scenario_id="scn", system_id="sys", timestamp=0,
            duration=10, iterations=1, seed=0, summary=summary,
        )
    return _make
