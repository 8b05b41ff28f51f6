"""Sample economies and batch experiment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ecopressure.api.schemas import MultiSeedRequest, MultiSeedResponse, PresetInfo
from ecopressure.experiment.presets import get_preset, list_presets
from ecopressure.experiment.runner import summarize

router = APIRouter()


@router.get("/presets", response_model=list[PresetInfo])
def get_presets():
    return [
        {"name": name, "description": get_preset(name).description}
        for name in list_presets()
    ]


@router.get("/presets/{name}")
def get_preset_detail(name: str):
    try:
        return get_preset(name).to_dict()
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Preset '{name}' not found")


@router.post("/presets/{name}/load")
def load_preset(name: str, request: Request):
    """Copy a preset's system and scenario into the workbench."""
    wb = request.app.state.workbench
    try:
        system, scenario = wb.load_preset(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Preset '{name}' not found")
    return {"system": system, "scenario": scenario}


@router.post("/multi-seed", response_model=MultiSeedResponse)
def multi_seed(req: MultiSeedRequest, request: Request):
    """Replay a scenario once per seed and aggregate the summary scalars."""
    wb = request.app.state.workbench
    try:
        results = wb.run_multi_seed(req.scenario_id, req.seeds, req.iterations)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]))
    return {
        "runs": len(results),
        "failed": sum(1 for r in results if not r.succeeded),
        "stats": summarize(results),
    }
