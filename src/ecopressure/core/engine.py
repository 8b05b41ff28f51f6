"""
Simulation driver.

Replays a scenario against an economy system for N independent iterations
and folds every iteration into one ``SimulationResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable
from uuid import uuid4

from ecopressure.core.config import SimulationConfig
from ecopressure.core.dynamics import process_actor_behaviors, update_resources
from ecopressure.core.events import UNNAMED_EVENT, EventError, apply_event
from ecopressure.core.lcg import SeededRandom
from ecopressure.core.model import DefinitionError, EconomySystem, SimulationScenario
from ecopressure.core.runlog import RunLog
from ecopressure.core.state import initialize_state
from ecopressure.core.transactions import process_transactions
from ecopressure.metrics.statistics import SimulationSummary, StatisticsAggregator

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------
@dataclass
class SimulationResult:
    """Everything a finished run hands to the results viewer."""
    id: str
    scenario_id: str
    system_id: str
    timestamp: int
    duration: int
    iterations: int
    seed: int
    summary: SimulationSummary
    time_series_data: list[dict[str, Any]] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scenarioId": self.scenario_id,
            "systemId": self.system_id,
            "timestamp": self.timestamp,
            "duration": self.duration,
            "iterations": self.iterations,
            "seed": self.seed,
            "timeSeriesData": self.time_series_data,
            "events": self.events,
            "summary": self.summary.to_dict(),
        }


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------
def _coerce_inputs(
    scenario: SimulationScenario | dict[str, Any] | None,
    system: EconomySystem | dict[str, Any] | None,
) -> tuple[SimulationScenario, EconomySystem]:
    missing = []
    if scenario is None:
        missing.append("scenario does not exist")
    if system is None:
        missing.append("economy system does not exist")
    if missing:
        raise DefinitionError(
            "Scenario or economy system is missing: " + "; ".join(missing)
        )

    if not isinstance(scenario, SimulationScenario):
        scenario = SimulationScenario.from_dict(scenario)
    if not isinstance(system, EconomySystem):
        system = EconomySystem.from_dict(system)
    return scenario, system


# ---------------------------------------------------------------------------
# Simulation Engine
# ---------------------------------------------------------------------------
class SimulationEngine:
    """
    Runs one simulation: ``IDLE -> RUNNING -> COMPLETED | FAILED``.

    Phases per tick:
    1. Apply due scenario events
    2. Regenerate pool resources
    3. Actor consumption and production
    4. Transactions
    5. Progress report and periodic snapshot

    ``on_complete`` and ``on_error`` fire exactly once per run and never
    both. An engine instance can be reused for another run once it is no
    longer running.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        on_progress: Callable[[int], None] | None = None,
        on_complete: Callable[[SimulationResult], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.config = config or SimulationConfig()
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.on_error = on_error

        # State
        self.status = RunStatus.IDLE
        self.log = RunLog()
        self.progress = 0
        self.current_iteration = 0
        self.current_time = 0
        self.result: SimulationResult | None = None
        self.error: str | None = None

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    def run(
        self,
        scenario: SimulationScenario | dict[str, Any] | None,
        system: EconomySystem | dict[str, Any] | None,
    ) -> SimulationResult | None:
        """Run to completion. Returns the result, or None if the run failed."""
        if self.is_running:
            raise RuntimeError("Simulation is already running")

        self.progress = 0
        self.current_iteration = 0
        self.current_time = 0
        self.result = None
        self.error = None

        try:
            self.config.validate()
            scenario_def, system_def = _coerce_inputs(scenario, system)
        except ValueError as exc:
            self.log = RunLog()
            self.log.error(f"Simulation rejected: {exc}")
            return self._fail(str(exc))

        self.log = RunLog(level=self.config.log_level)
        self.status = RunStatus.RUNNING
        try:
            result = self._simulate(scenario_def, system_def)
        except Exception as exc:
            logger.exception("Simulation failed for scenario %s", scenario_def.id)
            self.log.error(f"Simulation error: {exc}")
            return self._fail(str(exc) or type(exc).__name__)

        self.status = RunStatus.COMPLETED
        self.result = result
        if self.on_complete is not None:
            self.on_complete(result)
        return result

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def _simulate(
        self, scenario: SimulationScenario, system: EconomySystem,
    ) -> SimulationResult:
        config = self.config
        log = self.log
        seed = config.resolved_seed()
        rng = SeededRandom(seed)

        if scenario.economy_system_id and scenario.economy_system_id != system.id:
            logger.warning(
                "Scenario %s targets system %s but runs against %s",
                scenario.id, scenario.economy_system_id, system.id,
            )

        log.info(f"Starting simulation: {scenario.name}")
        log.info(f"Economy system: {system.name}")
        log.debug(f"Configuration: iterations={config.iterations}, seed={seed}")

        result = SimulationResult(
            id=uuid4().hex[:12],
            scenario_id=scenario.id,
            system_id=system.id,
            timestamp=int(datetime.now(timezone.utc).timestamp() * 1000),
            duration=scenario.duration,
            iterations=config.iterations,
            seed=seed,
            summary=SimulationSummary.for_system(system),
        )
        stats = StatisticsAggregator(system, result.summary)

        duration = scenario.duration
        total_steps = config.iterations * duration

        for iteration in range(config.iterations):
            self.current_iteration = iteration + 1
            log.debug(f"Starting iteration {iteration + 1}/{config.iterations}")

            state = initialize_state(system)
            if iteration == 0:
                result.time_series_data.append(state.snapshot(iteration))

            for time in range(1, duration + 1):
                self.current_time = time
                state.time = time

                for event in scenario.events_at(time):
                    try:
                        apply_event(state, event, time, result, log, iteration)
                    except EventError as exc:
                        log.error(
                            f"Skipped event {event.description or UNNAMED_EVENT}: {exc}"
                        )

                update_resources(state, system)
                process_actor_behaviors(state, system, time, rng)
                process_transactions(state, system, time, rng, result)

                step = iteration * duration + time
                self._report_progress(step * 100 // total_steps)

                if time % config.snapshot_interval == 0 or time == duration:
                    result.time_series_data.append(state.snapshot(iteration))

            stats.update(state)
            log.debug(f"Finished iteration {iteration + 1}/{config.iterations}")

        stats.finalize(result.time_series_data)
        log.info("Simulation complete")
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _report_progress(self, progress: int) -> None:
        self.progress = progress
        if self.on_progress is not None:
            self.on_progress(progress)

    def _fail(self, message: str) -> None:
        self.status = RunStatus.FAILED
        self.error = message
        if self.on_error is not None:
            self.on_error(message)
        return None
