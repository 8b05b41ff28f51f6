"""
FastAPI application factory for the Economic Pressure Sandbox API.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecopressure.api.sessions import Workbench
from ecopressure.api.routers import experiments, scenarios, simulation, systems

# Load .env: project root first, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/ecopressure/api/app.py → project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Economic Pressure Sandbox API",
        description="REST API for authoring and stress-testing game economies",
        version="0.3.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    log_level = os.environ.get("ECOPRESSURE_LOG_LEVEL", "info")
    application.state.workbench = Workbench(default_log_level=log_level)

    application.include_router(systems.router, prefix="/api/systems", tags=["systems"])
    application.include_router(scenarios.router, prefix="/api/scenarios", tags=["scenarios"])
    application.include_router(simulation.router, prefix="/api/simulation", tags=["simulation"])
    application.include_router(experiments.router, prefix="/api/experiments", tags=["experiments"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return application


app = create_app()
