"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any


# === Systems & scenarios ===

class CreateSystemRequest(BaseModel):
    system: dict[str, Any] | None = None
    name: str | None = None


class CreateScenarioRequest(BaseModel):
    economy_system_id: str
    scenario: dict[str, Any] | None = None
    name: str | None = None


class UpdateRequest(BaseModel):
    changes: dict[str, Any]


class SystemSummary(BaseModel):
    id: str
    name: str
    resource_count: int
    actor_count: int
    transaction_count: int


class ScenarioSummary(BaseModel):
    id: str
    name: str
    economy_system_id: str
    duration: int
    event_count: int


# === Simulation ===

class RunRequest(BaseModel):
    scenario_id: str
    iterations: int = Field(default=10, ge=1)
    seed: int | None = None
    log_level: str | None = None
    snapshot_interval: int = Field(default=10, ge=1)
    background: bool = True


class RunResponse(BaseModel):
    id: str
    scenario_id: str
    system_id: str
    status: str
    progress: int
    current_iteration: int
    current_time: int
    error: str | None
    result_id: str | None
    log: list[str]


class ResultSummary(BaseModel):
    id: str
    scenario_id: str
    system_id: str
    timestamp: int
    duration: int
    iterations: int
    seed: int
    system_stability: float
    inflation_rate: float
    inequality_index: float


class ResourceTrendResponse(BaseModel):
    resource_id: str
    trend: str
    percent_change: float
    times: list[int]
    values: list[float]


# === Experiments ===

class PresetInfo(BaseModel):
    name: str
    description: str


class MultiSeedRequest(BaseModel):
    scenario_id: str
    seeds: list[int] = Field(min_length=1)
    iterations: int = Field(default=10, ge=1)


class MultiSeedResponse(BaseModel):
    runs: int
    failed: int
    stats: dict[str, dict[str, float]]
