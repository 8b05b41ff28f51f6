"""Tests for authoring templates and sample economies."""

import pytest

from ecopressure.core.config import SimulationConfig
from ecopressure.core.engine import SimulationEngine
from ecopressure.core.model import EconomySystem, SimulationScenario
from ecopressure.experiment.presets import (
    EconomyPreset,
    blank_actor,
    blank_event,
    blank_resource,
    blank_scenario,
    blank_system,
    blank_transaction,
    get_preset,
    list_presets,
)


class TestBlankTemplates:
    def test_blank_system_parses(self):
        system = EconomySystem.from_dict(blank_system())
        assert system.name == "New economy system"
        assert system.resources == []

    def test_blank_resource(self):
        resource = blank_resource()
        assert resource["initialAmount"] == 100
        assert resource["maxAmount"] == 1000

    def test_blank_actor(self):
        actor = blank_actor("Trader")
        assert actor["name"] == "Trader"
        assert actor["behavior"]["tradingStrategy"] == "balanced"

    def test_blank_transaction_links_first_actors(self):
        system = blank_system()
        system["actors"] = [blank_actor("A"), blank_actor("B")]
        rule = blank_transaction(system)
        assert rule["sourceActorId"] == system["actors"][0]["id"]
        assert rule["targetActorId"] == system["actors"][1]["id"]
        assert rule["probability"] == 0.5
        assert rule["cooldown"] == 10

    def test_blank_transaction_without_actors(self):
        rule = blank_transaction()
        assert rule["sourceActorId"] == ""
        assert rule["targetActorId"] == ""

    def test_blank_scenario(self):
        scenario = SimulationScenario.from_dict(blank_scenario("sys"))
        assert scenario.duration == 365
        assert scenario.economy_system_id == "sys"

    def test_blank_event_halfway(self):
        assert blank_event(100)["triggerTime"] == 50

    def test_ids_are_unique(self):
        assert blank_system()["id"] != blank_system()["id"]


class TestPresets:
    def test_list_presets(self):
        assert list_presets() == ["closed_market", "gold_rush", "taxed_economy"]

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Unknown preset"):
            get_preset("utopia")

    @pytest.mark.parametrize("name", list_presets())
    def test_preset_is_consistent(self, name):
        preset = get_preset(name)
        assert isinstance(preset, EconomyPreset)
        assert preset.description
        assert preset.scenario.economy_system_id == preset.system.id
        for event in preset.scenario.events:
            assert event.is_valid

    @pytest.mark.parametrize("name", list_presets())
    def test_preset_runs_clean(self, name):
        preset = get_preset(name)
        engine = SimulationEngine(SimulationConfig(iterations=2, seed=11))
        result = engine.run(preset.scenario, preset.system)
        assert result is not None
        assert len(result.events) == 2 * len(preset.scenario.events)
        assert not any(line.startswith("[ERROR]") for line in engine.log.lines())

    def test_tax_hike_speeds_up_collection(self):
        preset = get_preset("taxed_economy")
        result = SimulationEngine(SimulationConfig(iterations=1, seed=11)).run(
            preset.scenario, preset.system,
        )
        # Collection through t=60 is capped by the 5-tick cooldown
        assert result.summary.transaction_stats["tax_rich"].count > 60 // 5

    def test_to_dict(self):
        d = get_preset("gold_rush").to_dict()
        assert d["name"] == "gold_rush"
        assert d["system"]["transactions"][0]["resources"] == {"gold": 2, "food": -10}
        assert d["scenario"]["duration"] == 120
