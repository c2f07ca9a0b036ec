"""FastAPI app entrypoint for the simulation clock."""

from fastapi import FastAPI

from sim_clock.api.routes import router, set_simulator
from sim_clock.config import SimConfig
from sim_clock.simulator import Simulator


def create_app(config: SimConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Sim Clock", description="Fixed-timestep simulation clock and runner")
    sim = Simulator(config or SimConfig.from_env())
    set_simulator(sim)
    app.include_router(router, tags=["clock"])
    return app


app = create_app()
