"""
In-memory workbench: economy systems, scenarios, simulation runs and results.

Systems and scenarios are stored in their normalised camelCase form, so
anything the store hands back has already passed boundary validation.
Runs wrap one ``SimulationEngine`` each and may execute in a background
thread; their progress is read straight off the engine.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any

from ecopressure.core.config import SimulationConfig
from ecopressure.core.engine import SimulationEngine, SimulationResult
from ecopressure.core.model import EconomySystem, SimulationScenario
from ecopressure.experiment.presets import blank_scenario, blank_system, get_preset
from ecopressure.experiment.runner import ExperimentRunner, ExperimentResult

logger = logging.getLogger(__name__)


@dataclass
class SimulationRun:
    """A queued, running, or finished simulation."""

    id: str
    scenario_id: str
    system_id: str
    config: SimulationConfig
    engine: SimulationEngine
    result_id: str | None = None
    thread: threading.Thread | None = field(default=None, repr=False)

    @property
    def status(self) -> str:
        return self.engine.status.value


class Workbench:
    """Manages authored economies and the simulations run against them.

    Parameters
    ----------
    default_log_level : str
        Log level for runs that do not ask for one.
    """

    def __init__(self, default_log_level: str = "info"):
        self.default_log_level = default_log_level
        self.systems: dict[str, dict[str, Any]] = {}
        self.scenarios: dict[str, dict[str, Any]] = {}
        self.results: dict[str, SimulationResult] = {}
        self.runs: dict[str, SimulationRun] = {}

        # Track run IDs currently executing in background threads
        self._running: set[str] = set()
        # Guards result storage against a concurrent system delete
        self._results_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Systems
    # ------------------------------------------------------------------
    def create_system(
        self, data: dict[str, Any] | None = None, name: str | None = None,
    ) -> dict[str, Any]:
        """Create a system from ``data`` layered over the blank template."""
        raw = blank_system()
        raw.update(data or {})
        if name:
            raw["name"] = name
        system = EconomySystem.from_dict(raw).to_dict()
        if system["id"] in self.systems:
            raise ValueError(f"System '{system['id']}' already exists")
        self.systems[system["id"]] = system
        return system

    def get_system(self, system_id: str) -> dict[str, Any]:
        if system_id not in self.systems:
            raise KeyError(f"System '{system_id}' not found")
        return self.systems[system_id]

    def list_systems(self) -> list[dict[str, Any]]:
        return list(self.systems.values())

    def update_system(self, system_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        current = self.get_system(system_id)
        raw = {**current, **changes, "id": system_id}
        system = EconomySystem.from_dict(raw).to_dict()
        self.systems[system_id] = system
        return system

    def delete_system(self, system_id: str) -> None:
        """Delete a system together with its scenarios and results."""
        self.get_system(system_id)
        with self._results_lock:
            del self.systems[system_id]
            for rid in [r.id for r in self.results.values() if r.system_id == system_id]:
                del self.results[rid]
        for sid in [s["id"] for s in self.scenarios.values()
                    if s["economySystemId"] == system_id]:
            del self.scenarios[sid]

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------
    def create_scenario(
        self,
        system_id: str,
        data: dict[str, Any] | None = None,
        name: str | None = None,
    ) -> dict[str, Any]:
        self.get_system(system_id)
        raw = blank_scenario(system_id)
        raw.update(data or {})
        raw["economySystemId"] = system_id
        if name:
            raw["name"] = name
        scenario = SimulationScenario.from_dict(raw).to_dict()
        if scenario["id"] in self.scenarios:
            raise ValueError(f"Scenario '{scenario['id']}' already exists")
        self.scenarios[scenario["id"]] = scenario
        return scenario

    def get_scenario(self, scenario_id: str) -> dict[str, Any]:
        if scenario_id not in self.scenarios:
            raise KeyError(f"Scenario '{scenario_id}' not found")
        return self.scenarios[scenario_id]

    def list_scenarios(self, system_id: str | None = None) -> list[dict[str, Any]]:
        return [
            s for s in self.scenarios.values()
            if system_id is None or s["economySystemId"] == system_id
        ]

    def update_scenario(self, scenario_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        current = self.get_scenario(scenario_id)
        raw = {**current, **changes, "id": scenario_id}
        if raw["economySystemId"] != current["economySystemId"]:
            self.get_system(raw["economySystemId"])
        scenario = SimulationScenario.from_dict(raw).to_dict()
        self.scenarios[scenario_id] = scenario
        return scenario

    def delete_scenario(self, scenario_id: str) -> None:
        self.get_scenario(scenario_id)
        del self.scenarios[scenario_id]

    def load_preset(self, name: str) -> tuple[dict[str, Any], dict[str, Any]]:
        """Copy a sample economy and its scenario into the workbench."""
        preset = get_preset(name)
        system = self.create_system(
            {**preset.system.to_dict(), "id": uuid.uuid4().hex[:8]},
        )
        scenario = self.create_scenario(
            system["id"], {**preset.scenario.to_dict(), "id": uuid.uuid4().hex[:8]},
        )
        return system, scenario

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------
    def _inputs_for(self, scenario_id: str) -> tuple[dict[str, Any], dict[str, Any]]:
        scenario = self.get_scenario(scenario_id)
        try:
            system = self.get_system(scenario["economySystemId"])
        except KeyError:
            raise KeyError(
                f"System '{scenario['economySystemId']}' for scenario "
                f"'{scenario_id}' not found"
            )
        return scenario, system

    def start_run(
        self,
        scenario_id: str,
        iterations: int = 10,
        seed: int | None = None,
        log_level: str | None = None,
        snapshot_interval: int = 10,
        background: bool = True,
    ) -> SimulationRun:
        """Start a simulation, in a daemon thread unless ``background`` is False."""
        scenario, system = self._inputs_for(scenario_id)
        config = SimulationConfig(
            scenario_id=scenario_id,
            system_id=system["id"],
            iterations=iterations,
            seed=seed,
            log_level=log_level or self.default_log_level,
            snapshot_interval=snapshot_interval,
        )
        run_id = uuid.uuid4().hex[:8]
        run = SimulationRun(
            id=run_id,
            scenario_id=scenario_id,
            system_id=system["id"],
            config=config,
            engine=SimulationEngine(config),
        )
        run.engine.on_complete = lambda result: self._store_result(run, result)
        self.runs[run_id] = run

        if not background:
            run.engine.run(scenario, system)
            return run

        self._running.add(run_id)

        def _worker():
            try:
                run.engine.run(scenario, system)
            except Exception:
                logger.exception("Background run failed for %s", run_id)
            finally:
                self._running.discard(run_id)

        run.thread = threading.Thread(target=_worker, daemon=True)
        run.thread.start()
        return run

    def _store_result(self, run: SimulationRun, result: SimulationResult) -> None:
        with self._results_lock:
            # The system may have been deleted while the run was in flight
            if run.system_id not in self.systems:
                logger.info("Discarding result of run %s: system %s was deleted",
                            run.id, run.system_id)
                return
            self.results[result.id] = result
            run.result_id = result.id

    def get_run(self, run_id: str) -> SimulationRun:
        if run_id not in self.runs:
            raise KeyError(f"Run '{run_id}' not found")
        return self.runs[run_id]

    def is_running(self, run_id: str) -> bool:
        """Check if a run is executing in a background thread."""
        return run_id in self._running

    def run_multi_seed(
        self, scenario_id: str, seeds: list[int], iterations: int = 10,
    ) -> list[ExperimentResult]:
        """Replay a scenario once per seed without storing the results."""
        scenario, system = self._inputs_for(scenario_id)
        runner = ExperimentRunner(
            EconomySystem.from_dict(system), SimulationScenario.from_dict(scenario),
        )
        config = SimulationConfig(
            scenario_id=scenario_id,
            system_id=system["id"],
            iterations=iterations,
            log_level=self.default_log_level,
        )
        return runner.run_multi_seed(config, seeds)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def get_result(self, result_id: str) -> SimulationResult:
        if result_id not in self.results:
            raise KeyError(f"Result '{result_id}' not found")
        return self.results[result_id]

    def list_results(self, scenario_id: str | None = None) -> list[SimulationResult]:
        return [
            r for r in self.results.values()
            if scenario_id is None or r.scenario_id == scenario_id
        ]

    def delete_result(self, result_id: str) -> None:
        self.get_result(result_id)
        del self.results[result_id]
