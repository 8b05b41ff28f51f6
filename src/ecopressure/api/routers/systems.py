"""Economy system authoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ecopressure.api.schemas import CreateSystemRequest, SystemSummary, UpdateRequest
from ecopressure.core.model import DefinitionError

router = APIRouter()


def _summary(system: dict) -> dict:
    return {
        "id": system["id"],
        "name": system["name"],
        "resource_count": len(system["resources"]),
        "actor_count": len(system["actors"]),
        "transaction_count": len(system["transactions"]),
    }


@router.post("")
def create_system(req: CreateSystemRequest, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.create_system(req.system, name=req.name)
    except DefinitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get("", response_model=list[SystemSummary])
def list_systems(request: Request):
    wb = request.app.state.workbench
    return [_summary(s) for s in wb.list_systems()]


@router.get("/{system_id}")
def get_system(system_id: str, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.get_system(system_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"System '{system_id}' not found")


@router.put("/{system_id}")
def update_system(system_id: str, req: UpdateRequest, request: Request):
    wb = request.app.state.workbench
    try:
        return wb.update_system(system_id, req.changes)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"System '{system_id}' not found")
    except DefinitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/{system_id}")
def delete_system(system_id: str, request: Request):
    """Delete a system and every scenario and result built on it."""
    wb = request.app.state.workbench
    try:
        wb.delete_system(system_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"System '{system_id}' not found")
    return {"deleted": True}
