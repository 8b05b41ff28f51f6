"""Integration tests for SimulationEngine."""

import logging

import pytest

from ecopressure.core.config import SimulationConfig
from ecopressure.core.engine import RunStatus, SimulationEngine, SimulationResult
from ecopressure.core.model import EconomySystem, SimulationScenario


def _config(**overrides):
    params = {"iterations": 1, "seed": 42}
    params.update(overrides)
    return SimulationConfig(**params)


def _shock_system(regen=0):
    return {
        "id": "pool",
        "name": "Pool",
        "resources": [
            {"id": "ore", "name": "Ore", "initialAmount": 100,
             "regenerationRate": regen, "maxAmount": 1000},
        ],
        "actors": [],
        "transactions": [],
    }


class TestBasicRun:
    def test_run_completes(self, market_system, market_scenario):
        engine = SimulationEngine(_config(iterations=2))
        result = engine.run(market_scenario, market_system)

        assert isinstance(result, SimulationResult)
        assert engine.status is RunStatus.COMPLETED
        assert engine.result is result
        assert engine.progress == 100
        assert engine.current_iteration == 2
        assert engine.current_time == 40
        assert result.iterations == 2
        assert result.duration == 40
        assert result.seed == 42

    def test_accepts_dicts(self, trade_system_dict, scenario_dict):
        engine = SimulationEngine(_config())
        result = engine.run(scenario_dict(), trade_system_dict())
        assert result is not None
        assert result.system_id == "trade"
        assert result.scenario_id == "scn"

    def test_result_to_dict(self, market_system, market_scenario):
        d = SimulationEngine(_config()).run(market_scenario, market_system).to_dict()
        assert set(d) == {
            "id", "scenarioId", "systemId", "timestamp", "duration",
            "iterations", "seed", "timeSeriesData", "events", "summary",
        }
        assert d["summary"]["resourceStats"]["gold"]["finalAmount"] >= 0

    def test_random_seed_is_recorded(self, static_system, scenario_dict):
        config = SimulationConfig(iterations=1)
        result = SimulationEngine(config).run(scenario_dict("static"), static_system)
        assert 0 <= result.seed < 1000
        assert config.seed is None

    def test_unseeded_engine_draws_fresh_seeds(self, static_system, scenario_dict):
        engine = SimulationEngine(SimulationConfig(iterations=1))
        seeds = {
            engine.run(scenario_dict("static", duration=1), static_system).seed
            for _ in range(20)
        }
        assert len(seeds) > 1
        assert engine.config.seed is None

    def test_engine_is_reusable(self, trade_system, scenario_dict):
        engine = SimulationEngine(_config())
        first = engine.run(scenario_dict(), trade_system)
        second = engine.run(scenario_dict(), trade_system)
        assert first.id != second.id
        assert engine.status is RunStatus.COMPLETED

    def test_rejects_concurrent_run(self, trade_system, scenario_dict):
        engine = SimulationEngine(_config())
        engine.status = RunStatus.RUNNING
        assert engine.is_running
        with pytest.raises(RuntimeError, match="already running"):
            engine.run(scenario_dict(), trade_system)


class TestDeterminism:
    def test_same_seed_same_outcome(self, market_system, market_scenario):
        a = SimulationEngine(_config(iterations=3)).run(market_scenario, market_system)
        b = SimulationEngine(_config(iterations=3)).run(market_scenario, market_system)

        assert a.summary.system_stability == b.summary.system_stability
        assert a.summary.inflation_rate == b.summary.inflation_rate
        assert a.summary.inequality_index == b.summary.inequality_index
        assert a.summary.to_dict() == b.summary.to_dict()
        assert a.events == b.events
        assert a.time_series_data == b.time_series_data

    def test_different_seed_diverges(self, market_system, market_scenario):
        a = SimulationEngine(_config(iterations=3, seed=1)).run(market_scenario, market_system)
        b = SimulationEngine(_config(iterations=3, seed=2)).run(market_scenario, market_system)
        assert a.time_series_data != b.time_series_data


class TestInvariants:
    def test_resource_bounds(self, market_system, market_scenario):
        result = SimulationEngine(
            _config(iterations=3, snapshot_interval=1),
        ).run(market_scenario, market_system)
        for snap in result.time_series_data:
            for resource in snap["resources"].values():
                assert 0 <= resource["amount"] <= resource["maxAmount"]

    def test_cooldown_respected(self, market_system, market_scenario):
        result = SimulationEngine(
            _config(snapshot_interval=1),
        ).run(market_scenario, market_system)

        for tid, cooldown in (("sell_ore", 2), ("pay_gold", 3)):
            times = []
            previous = 0
            for snap in result.time_series_data:
                count = snap["transactions"][tid]["count"]
                if count > previous:
                    assert count == previous + 1
                    times.append(snap["time"])
                previous = count
            assert len(times) >= 2
            assert all(t2 - t1 >= cooldown for t1, t2 in zip(times, times[1:]))

    def test_holdings_never_negative(self, scenario_dict):
        system = {
            "id": "debts",
            "name": "Debts",
            "resources": [{"id": "gold", "name": "Gold", "initialAmount": 10}],
            "actors": [
                {"id": "spender", "name": "Spender", "resources": {"gold": 0},
                 "behavior": {"productionRate": {"gold": -5}}},
                {"id": "debtor", "name": "Debtor", "resources": {"gold": -50}},
            ],
            "transactions": [],
        }
        result = SimulationEngine(_config(snapshot_interval=1)).run(
            scenario_dict("debts", duration=4), system,
        )
        holdings = [
            amount
            for snap in result.time_series_data
            for actor in snap["actors"].values()
            for amount in actor["resources"].values()
        ]
        assert holdings
        assert all(h >= 0 for h in holdings)

    def test_definition_is_untouched(self, market_system, market_scenario):
        before = market_system.to_dict()
        SimulationEngine(_config(iterations=2)).run(market_scenario, market_system)
        assert market_system.to_dict() == before


class TestScenarios:
    def test_static_economy(self, static_system, scenario_dict):
        result = SimulationEngine(_config()).run(
            scenario_dict("static", duration=10), static_system,
        )
        summary = result.summary
        assert summary.resource_stats["ore"].final_amount == 100
        assert summary.system_stability == 1
        assert summary.inflation_rate == 0
        assert summary.inequality_index == 0

    def test_shock_at_trigger_time(self, scenario_dict):
        scenario = scenario_dict("pool", duration=6, events=[
            {"id": "crash", "description": "Crash", "triggerTime": 5,
             "type": "resource_shock",
             "data": {"resourceId": "ore", "changePercent": -50}},
        ])
        result = SimulationEngine(_config(snapshot_interval=1)).run(
            scenario, _shock_system(),
        )
        amounts = {s["time"]: s["resources"]["ore"]["amount"]
                   for s in result.time_series_data}
        assert amounts[4] == 100
        assert amounts[5] == 50
        assert result.events == [{
            "iteration": 0, "time": 5, "type": "resource_shock", "description": "Crash",
            "data": {"resourceId": "ore", "changePercent": -50},
        }]

    def test_shock_applies_before_regeneration(self, scenario_dict):
        scenario = scenario_dict("pool", duration=5, events=[
            {"id": "crash", "triggerTime": 5, "type": "resource_shock",
             "data": {"resourceId": "ore", "changePercent": -50}},
        ])
        result = SimulationEngine(_config(snapshot_interval=1)).run(
            scenario, _shock_system(regen=10),
        )
        final = result.time_series_data[-1]
        # 100 + 4 * 10 = 140, halved to 70, then regrows to 80
        assert final["time"] == 5
        assert final["resources"]["ore"]["amount"] == 80

    def test_insufficient_balance_skip(self, trade_system, scenario_dict):
        result = SimulationEngine(_config(snapshot_interval=1)).run(
            scenario_dict(duration=3), trade_system,
        )
        holdings = [
            (s["time"], s["actors"]["a"]["resources"]["gold"],
             s["actors"]["b"]["resources"]["gold"])
            for s in result.time_series_data
        ]
        assert holdings == [(0, 20, 0), (1, 10, 10), (2, 0, 20), (3, 0, 20)]
        assert result.summary.transaction_stats["pay"].count == 2
        assert result.summary.transaction_stats["pay"].average_size == 10

    def test_transaction_change_is_per_iteration(self, trade_system, scenario_dict):
        scenario = scenario_dict(duration=3, events=[
            {"id": "slow", "triggerTime": 2, "type": "transaction_change",
             "data": {"transactionId": "pay", "changeType": "cooldown",
                      "newValue": 100}},
        ])
        result = SimulationEngine(_config(iterations=2)).run(scenario, trade_system)
        # One execution at t=1 in each iteration, then the long cooldown
        assert result.summary.transaction_stats["pay"].count == 2
        assert trade_system.transaction("pay").cooldown == 0
        assert len(result.events) == 2

    def test_bad_event_is_skipped(self, static_system, scenario_dict):
        scenario = scenario_dict("static", duration=5, events=[
            {"id": "bad", "description": "Ghost shock", "triggerTime": 2,
             "type": "resource_shock",
             "data": {"resourceId": "ghost", "changePercent": -50}},
        ])
        engine = SimulationEngine(_config())
        result = engine.run(scenario, static_system)
        assert engine.status is RunStatus.COMPLETED
        assert result.events == []
        assert any(
            line.startswith("[ERROR] Skipped event Ghost shock")
            for line in engine.log.lines()
        )


class TestSnapshots:
    def test_schedule(self, static_system, scenario_dict):
        result = SimulationEngine(_config(iterations=2)).run(
            scenario_dict("static", duration=25), static_system,
        )
        points = [(s["iteration"], s["time"]) for s in result.time_series_data]
        assert points == [
            (0, 0), (0, 10), (0, 20), (0, 25),
            (1, 10), (1, 20), (1, 25),
        ]

    def test_custom_interval(self, static_system, scenario_dict):
        result = SimulationEngine(_config(snapshot_interval=4)).run(
            scenario_dict("static", duration=10), static_system,
        )
        assert [s["time"] for s in result.time_series_data] == [0, 4, 8, 10]


class TestCallbacks:
    def test_progress_and_complete(self, trade_system, scenario_dict):
        progress, completed, errors = [], [], []
        engine = SimulationEngine(
            _config(iterations=2),
            on_progress=progress.append,
            on_complete=completed.append,
            on_error=errors.append,
        )
        result = engine.run(scenario_dict(duration=4), trade_system)

        assert progress == sorted(progress)
        assert len(progress) == 8
        assert progress[-1] == 100
        assert completed == [result]
        assert errors == []

    def test_missing_inputs(self, trade_system):
        completed, errors = [], []
        engine = SimulationEngine(
            _config(), on_complete=completed.append, on_error=errors.append,
        )
        assert engine.run(None, trade_system) is None
        assert engine.status is RunStatus.FAILED
        assert completed == []
        assert len(errors) == 1
        assert "missing" in errors[0]
        assert engine.log.lines()[0].startswith("[ERROR] Simulation rejected")

    def test_malformed_system(self, scenario_dict):
        errors = []
        engine = SimulationEngine(_config(), on_error=errors.append)
        assert engine.run(scenario_dict(), {"id": "x", "resources": []}) is None
        assert engine.status is RunStatus.FAILED
        assert "'id' and 'name'" in errors[0]

    def test_invalid_iterations(self, trade_system, scenario_dict):
        engine = SimulationEngine(_config(iterations=0))
        assert engine.run(scenario_dict(), trade_system) is None
        assert engine.status is RunStatus.FAILED
        assert "iterations" in engine.error

    def test_loop_failure(self, trade_system, scenario_dict, monkeypatch):
        def _boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("ecopressure.core.engine.process_transactions", _boom)
        completed, errors = [], []
        engine = SimulationEngine(
            _config(), on_complete=completed.append, on_error=errors.append,
        )
        assert engine.run(scenario_dict(), trade_system) is None
        assert engine.status is RunStatus.FAILED
        assert engine.result is None
        assert errors == ["boom"]
        assert completed == []
        assert "[ERROR] Simulation error: boom" in engine.log.lines()


class TestRunLog:
    def test_info_level(self, market_system, market_scenario):
        engine = SimulationEngine(_config())
        engine.run(market_scenario, market_system)
        lines = engine.log.lines()
        assert lines[0] == "[INFO] Starting simulation: Market shock"
        assert lines[1] == "[INFO] Economy system: Market"
        assert "[INFO] Simulation complete" in lines
        assert not any(line.startswith("[DEBUG]") for line in lines)

    def test_debug_level(self, market_system, market_scenario):
        engine = SimulationEngine(_config(log_level="debug"))
        engine.run(market_scenario, market_system)
        assert "[DEBUG] Starting iteration 1/1" in engine.log.lines()

    def test_error_level_is_quiet(self, market_system, market_scenario):
        engine = SimulationEngine(_config(log_level="error"))
        engine.run(market_scenario, market_system)
        assert engine.log.lines() == []

    def test_mismatched_system_warning(self, static_system, scenario_dict, caplog):
        with caplog.at_level(logging.WARNING, logger="ecopressure.core.engine"):
            result = SimulationEngine(_config()).run(
                scenario_dict("elsewhere"), static_system,
            )
        assert result is not None
        assert "targets system elsewhere" in caplog.text

    def test_events_recorded_every_iteration(self, market_system, market_scenario):
        result = SimulationEngine(_config(iterations=3)).run(
            market_scenario, market_system,
        )
        assert [e["time"] for e in result.events] == [15, 20] * 3
        assert [e["iteration"] for e in result.events] == [0, 0, 1, 1, 2, 2]


class TestScenarioObjects:
    def test_parsed_definitions(self, trade_system_dict, scenario_dict):
        system = EconomySystem.from_dict(trade_system_dict())
        scenario = SimulationScenario.from_dict(scenario_dict())
        result = SimulationEngine(_config()).run(scenario, system)
        assert result.summary.actor_stats["b"].resource_growth == {"gold": 20}
        assert result.summary.actor_stats["a"].wealth_change == 0
