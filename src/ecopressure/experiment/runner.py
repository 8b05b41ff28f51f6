"""
Experiment Runner: multi-seed replays, comparisons, and parameter sweeps.

Wraps ``SimulationEngine`` for batch use: every run gets its own engine and
config copy, and failures are kept on the result rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ecopressure.core.config import SimulationConfig
from ecopressure.core.engine import SimulationEngine, SimulationResult
from ecopressure.core.model import EconomySystem, SimulationScenario

SUMMARY_SCALARS = ("system_stability", "inflation_rate", "inequality_index")


@dataclass
class ExperimentResult:
    """Result of a single experiment run."""
    config: SimulationConfig
    result: SimulationResult | None
    error: str | None = None
    log: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass
class ComparisonResult:
    """Result of comparing two or more experiments."""
    results: dict[str, ExperimentResult]
    config_diffs: dict[str, Any]


def _copy_config(config: SimulationConfig, **overrides: Any) -> SimulationConfig:
    d = config.to_dict()
    d.update(overrides)
    return SimulationConfig.from_dict(d)


def summarize(results: list[ExperimentResult]) -> dict[str, dict[str, float]]:
    """Mean, std, min and max of each summary scalar over successful runs."""
    finished = [r.result for r in results if r.result is not None]
    out: dict[str, dict[str, float]] = {}
    for name in SUMMARY_SCALARS:
        values = np.array([getattr(res.summary, name) for res in finished], dtype=float)
        if values.size == 0:
            out[name] = {"mean": 0.0, "std": 0.0, "min": 0.0, "max": 0.0}
            continue
        out[name] = {
            "mean": float(values.mean()),
            "std": float(values.std()),
            "min": float(values.min()),
            "max": float(values.max()),
        }
    return out


class ExperimentRunner:
    """
    Run, compare, and sweep simulation experiments against one economy.
    """

    def __init__(self, system: EconomySystem, scenario: SimulationScenario):
        self.system = system
        self.scenario = scenario

    def run_experiment(self, config: SimulationConfig) -> ExperimentResult:
        """Run a single experiment and return results."""
        engine = SimulationEngine(config)
        result = engine.run(self.scenario, self.system)
        return ExperimentResult(
            config=config,
            result=result,
            error=engine.error,
            log=engine.log.lines(),
        )

    def compare_experiments(
        self, configs: dict[str, SimulationConfig],
    ) -> ComparisonResult:
        """Run multiple experiments and compare results."""
        results: dict[str, ExperimentResult] = {}
        for name, config in configs.items():
            results[name] = self.run_experiment(config)

        config_names = list(configs.keys())
        diffs: dict[str, Any] = {}
        if len(config_names) >= 2:
            base = configs[config_names[0]]
            for name in config_names[1:]:
                diffs[f"{config_names[0]}_vs_{name}"] = base.diff(configs[name])

        return ComparisonResult(results=results, config_diffs=diffs)

    def run_parameter_sweep(
        self,
        base_config: SimulationConfig,
        param_name: str,
        values: list[Any],
    ) -> dict[str, ExperimentResult]:
        """
        Sweep a single config parameter across multiple values.

        Args:
            base_config: Base configuration to modify
            param_name: Name of the parameter to sweep (attribute on SimulationConfig)
            values: List of values to test

        Returns:
            Dict mapping value label -> ExperimentResult
        """
        if param_name not in base_config.to_dict():
            raise KeyError(f"SimulationConfig has no parameter '{param_name}'")

        results: dict[str, ExperimentResult] = {}
        for val in values:
            config = _copy_config(base_config, **{param_name: val})
            results[f"{param_name}={val}"] = self.run_experiment(config)
        return results

    def run_multi_seed(
        self, config: SimulationConfig, seeds: list[int],
    ) -> list[ExperimentResult]:
        """
        Run the same configuration with multiple seeds.

        Useful for measuring variance in outcomes.
        """
        return [
            self.run_experiment(_copy_config(config, seed=seed))
            for seed in seeds
        ]
