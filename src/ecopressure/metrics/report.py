"""
Read-side helpers for finished results: trends and per-snapshot series.
"""

from __future__ import annotations

from typing import Any

from ecopressure.core.engine import SimulationResult

# Relative change (in percent) below which a resource counts as stable
TREND_THRESHOLD = 5.0


def resource_trend(
    result: SimulationResult, resource_id: str,
) -> tuple[str, float]:
    """Direction and percent change of a pool resource, first to last snapshot.

    Returns ``("up" | "down" | "stable", percent_change)``.
    """
    series = result.time_series_data
    if len(series) < 2:
        return "stable", 0.0
    start = series[0]["resources"].get(resource_id)
    end = series[-1]["resources"].get(resource_id)
    if start is None or end is None or start["amount"] == 0:
        return "stable", 0.0

    percent = (end["amount"] - start["amount"]) / start["amount"] * 100
    if percent > TREND_THRESHOLD:
        return "up", percent
    if percent < -TREND_THRESHOLD:
        return "down", percent
    return "stable", percent


def resource_series(
    result: SimulationResult, resource_id: str, iteration: int = 0,
) -> list[tuple[int, float]]:
    """(time, amount) pairs for one resource in one iteration."""
    return [
        (snap["time"], snap["resources"][resource_id]["amount"])
        for snap in result.time_series_data
        if snap["iteration"] == iteration and resource_id in snap["resources"]
    ]


def actor_wealth_series(
    result: SimulationResult, actor_id: str, iteration: int = 0,
) -> list[tuple[int, float]]:
    """(time, total holdings) pairs for one actor in one iteration."""
    points = []
    for snap in result.time_series_data:
        if snap["iteration"] != iteration:
            continue
        actor: dict[str, Any] | None = snap["actors"].get(actor_id)
        if actor is not None:
            points.append((snap["time"], float(sum(actor["resources"].values()))))
    return points


def stability_label(stability: float) -> str:
    if stability >= 1.0:
        return "stable"
    if stability >= 0.5:
        return "moderate"
    return "volatile"
