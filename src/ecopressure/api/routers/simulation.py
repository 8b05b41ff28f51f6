"""Simulation run and result endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ecopressure.api.schemas import (
    ResourceTrendResponse,
    ResultSummary,
    RunRequest,
    RunResponse,
)
from ecopressure.metrics.report import resource_series, resource_trend

router = APIRouter()


def _run_response(run) -> dict:
    engine = run.engine
    return {
        "id": run.id,
        "scenario_id": run.scenario_id,
        "system_id": run.system_id,
        "status": run.status,
        "progress": engine.progress,
        "current_iteration": engine.current_iteration,
        "current_time": engine.current_time,
        "error": engine.error,
        "result_id": run.result_id,
        "log": engine.log.lines(),
    }


def _result_summary(result) -> dict:
    return {
        "id": result.id,
        "scenario_id": result.scenario_id,
        "system_id": result.system_id,
        "timestamp": result.timestamp,
        "duration": result.duration,
        "iterations": result.iterations,
        "seed": result.seed,
        "system_stability": result.summary.system_stability,
        "inflation_rate": result.summary.inflation_rate,
        "inequality_index": result.summary.inequality_index,
    }


def _get_result(request: Request, result_id: str):
    wb = request.app.state.workbench
    try:
        return wb.get_result(result_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Result '{result_id}' not found")


@router.post("/runs", response_model=RunResponse)
def start_run(req: RunRequest, request: Request):
    wb = request.app.state.workbench
    try:
        run = wb.start_run(
            req.scenario_id,
            iterations=req.iterations,
            seed=req.seed,
            log_level=req.log_level,
            snapshot_interval=req.snapshot_interval,
            background=req.background,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]))
    return _run_response(run)


@router.get("/runs/{run_id}", response_model=RunResponse)
def get_run(run_id: str, request: Request):
    wb = request.app.state.workbench
    try:
        run = wb.get_run(run_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Run '{run_id}' not found")
    return _run_response(run)


@router.get("/results", response_model=list[ResultSummary])
def list_results(request: Request, scenario_id: str | None = None):
    wb = request.app.state.workbench
    return [_result_summary(r) for r in wb.list_results(scenario_id)]


@router.get("/results/{result_id}")
def get_result(result_id: str, request: Request):
    return _get_result(request, result_id).to_dict()


@router.get(
    "/results/{result_id}/resources/{resource_id}",
    response_model=ResourceTrendResponse,
)
def get_resource_trend(
    result_id: str, resource_id: str, request: Request, iteration: int = 0,
):
    """Trend plus the sampled amounts of one resource in one iteration."""
    result = _get_result(request, result_id)
    if resource_id not in result.summary.resource_stats:
        raise HTTPException(
            status_code=404,
            detail=f"Resource '{resource_id}' not in result '{result_id}'",
        )
    trend, percent = resource_trend(result, resource_id)
    series = resource_series(result, resource_id, iteration)
    return {
        "resource_id": resource_id,
        "trend": trend,
        "percent_change": percent,
        "times": [t for t, _ in series],
        "values": [v for _, v in series],
    }


@router.delete("/results/{result_id}")
def delete_result(result_id: str, request: Request):
    wb = request.app.state.workbench
    try:
        wb.delete_result(result_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Result '{result_id}' not found")
    return {"deleted": True}
