#!/usr/bin/env python3
"""Run the closed-market sample economy and print results."""

from ecopressure.core.config import SimulationConfig
from ecopressure.core.engine import SimulationEngine
from ecopressure.experiment.presets import get_preset
from ecopressure.metrics.report import (
    actor_wealth_series,
    resource_trend,
    stability_label,
)


def main():
    preset = get_preset("closed_market")
    system, scenario = preset.system, preset.scenario
    config = SimulationConfig(iterations=5, seed=42)

    print(f"=== Economic Pressure Sandbox: {scenario.name} ===")
    print(f"Economy: {system.name}")
    print(f"Resources: {', '.join(r.id for r in system.resources)}")
    print(f"Actors: {', '.join(a.id for a in system.actors)}")
    print(f"Duration: {scenario.duration}  Iterations: {config.iterations}")
    print()

    engine = SimulationEngine(config)
    result = engine.run(scenario, system)
    if result is None:
        print(f"Simulation failed: {engine.error}")
        return

    summary = result.summary
    print(f"{'Resource':<10} {'Min':>8} {'Max':>8} {'Final':>8} {'Vol':>6} {'Trend':>8}")
    print("-" * 54)
    for rid, stats in summary.resource_stats.items():
        trend, pct = resource_trend(result, rid)
        print(
            f"{rid:<10} {stats.min:8.1f} {stats.max:8.1f} "
            f"{stats.final_amount:8.1f} {stats.volatility:6.2f} "
            f"{trend:>5} {pct:+.0f}%"
        )

    print()
    print(f"{'Actor':<10} {'Wealth':>8} {'Trades':>7}  Growth")
    print("-" * 54)
    for aid, stats in summary.actor_stats.items():
        growth = ", ".join(f"{r}={g:+.0f}" for r, g in stats.resource_growth.items())
        print(f"{aid:<10} {stats.wealth_change:8.1f} {stats.transaction_count:7d}  {growth}")

    print()
    print(f"System stability: {summary.system_stability:.3f} "
          f"({stability_label(summary.system_stability)})")
    print(f"Inflation rate: {summary.inflation_rate * 100:+.1f}%")
    print(f"Inequality (Gini): {summary.inequality_index:.3f}")

    print(f"\nMiner wealth, first iteration:")
    for time, wealth in actor_wealth_series(result, "miner"):
        print(f"  t={time:3d}: {wealth:8.1f}")

    print(f"\nEvents applied: {len(result.events)}")
    for line in engine.log.lines():
        print(f"  {line}")


if __name__ == "__main__":
    main()
