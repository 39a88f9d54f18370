"""Environmental factors and zones."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from birdsim.api.dependencies import get_coordinator
from birdsim.api.schemas import EnvironmentalFactorsSchema, ZoneSchema
from birdsim.engine.coordinator import Coordinator

router = APIRouter()


@router.get("/environment", response_model=EnvironmentalFactorsSchema)
def get_environment(
    coordinator: Coordinator = Depends(get_coordinator),
) -> EnvironmentalFactorsSchema:
    return EnvironmentalFactorsSchema.from_factors(coordinator.get_environmental_factors())


@router.post("/environment", response_model=EnvironmentalFactorsSchema)
def set_environment(
    body: EnvironmentalFactorsSchema,
    coordinator: Coordinator = Depends(get_coordinator),
) -> EnvironmentalFactorsSchema:
    """Replace the factors. The world is regenerated with a new predator count."""
    factors = coordinator.set_environmental_factors(body.to_factors())
    return EnvironmentalFactorsSchema.from_factors(factors)


@router.get("/zones", response_model=list[ZoneSchema])
def get_zones(
    coordinator: Coordinator = Depends(get_coordinator),
) -> list[ZoneSchema]:
    return [ZoneSchema.from_zone(z) for z in coordinator.get_zones()]


@router.post("/zones", response_model=list[ZoneSchema])
def set_zones(
    body: list[ZoneSchema],
    coordinator: Coordinator = Depends(get_coordinator),
) -> list[ZoneSchema]:
    zones = coordinator.set_zones([z.to_zone() for z in body])
    return [ZoneSchema.from_zone(z) for z in zones]
