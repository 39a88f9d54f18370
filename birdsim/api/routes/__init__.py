"""API route modules."""

from fastapi import APIRouter

from birdsim.api.routes.config import router as config_router
from birdsim.api.routes.control import router as control_router
from birdsim.api.routes.environment import router as environment_router
from birdsim.api.routes.snapshots import router as snapshots_router
from birdsim.api.routes.state import router as state_router

api_router = APIRouter()
api_router.include_router(state_router, tags=["State"])
api_router.include_router(config_router, tags=["Config"])
api_router.include_router(snapshots_router, tags=["Snapshots"])
api_router.include_router(control_router, tags=["Control"])
api_router.include_router(environment_router, tags=["Environment"])

__all__ = ["api_router"]
