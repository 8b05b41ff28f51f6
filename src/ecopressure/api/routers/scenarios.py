"""Simulation scenario authoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ecopressure.api.schemas import CreateScenarioRequest, ScenarioSummary, UpdateRequest
from ecopressure.core.model import DefinitionError

router = APIRouter()


def _summary(scenario: dict) -> dict:
    return {
        "id": scenario["id"],
        "name": scenario["name"],
        "economy_system_id": scenario["economySystemId"],
        "duration": scenario["duration"],
        "event_count": len(scenario["events"]),
    }


@router.post("")
def create_scenario(req: CreateScenarioRequest, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.create_scenario(req.economy_system_id, req.scenario, name=req.name)
    except KeyError:
        raise HTTPException(
            status_code=404, detail=f"System '{req.economy_system_id}' not found",
        )
    except DefinitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get("", response_model=list[ScenarioSummary])
def list_scenarios(request: Request, system_id: str | None = None):
    wb = request.app.state.workbench
    return [_summary(s) for s in wb.list_scenarios(system_id)]


@router.get("/{scenario_id}")
def get_scenario(scenario_id: str, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.get_scenario(scenario_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found")


@router.put("/{scenario_id}")
def update_scenario(scenario_id: str, req: UpdateRequest, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.update_scenario(scenario_id, req.changes)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]))
    except DefinitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/{scenario_id}")
def delete_scenario(scenario_id: str, request: Request):
    wb = request.app.state.workbench
    try:
        wb.delete_scenario(scenario_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found")
    return {"deleted": True}
