"""Pydantic request/response models for the REST API.

Field aliases give the JSON bodies camelCase names (`isRunning`,
`worldSize`, `timeStep`, ...); the Python side stays snake_case. Collections
keep their model names, so the state payload carries `agents` and `tick`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from birdsim.config import EnvironmentalFactors, SimulationConfig
from birdsim.core.models import Vector2, Zone


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Entities ---

class AgentSchema(_Schema):
    id: int
    position: list[float]
    velocity: list[float]
    state: str
    target: list[float]
    group: int
    collision_tick: int = Field(0, alias="collisionTick")


class ObstacleSchema(_Schema):
    id: int
    position: list[float]
    radius: float


class ResourceSchema(_Schema):
    id: int
    position: list[float]
    type: str
    capacity: int
    current: int


class PredatorSchema(_Schema):
    id: int
    position: list[float]
    velocity: list[float]


class ZoneSchema(_Schema):
    id: int
    position: list[float] = Field(min_length=2, max_length=2)
    temperature: float = Field(allow_inf_nan=False)
    food_availability: float = Field(alias="foodAvailability", allow_inf_nan=False)
    predator_presence: float = Field(alias="predatorPresence", allow_inf_nan=False)

    @classmethod
    def from_zone(cls, zone: Zone) -> ZoneSchema:
        return cls(
            id=zone.id,
            position=zone.position.as_list(),
            temperature=zone.temperature,
            food_availability=zone.food_availability,
            predator_presence=zone.predator_presence,
        )

    def to_zone(self) -> Zone:
        return Zone(
            id=self.id,
            position=Vector2(self.position[0], self.position[1]),
            temperature=self.temperature,
            food_availability=self.food_availability,
            predator_presence=self.predator_presence,
        )


# --- World ---

class WorldStateResponse(_Schema):
    agents: list[AgentSchema]
    tick: int
    running: bool = Field(alias="isRunning")
    world_size: int = Field(alias="worldSize")
    obstacles: list[ObstacleSchema]
    resources: list[ResourceSchema]
    collision_count: int = Field(alias="collisionCount")
    predators: list[PredatorSchema]
    zones: list[ZoneSchema]
    seed: int


# --- Config / environment ---

class SimulationConfigSchema(_Schema):
    speed: int = Field(gt=0, le=60_000, description="Tick interval in milliseconds")
    world_size: int = Field(alias="worldSize", gt=0, le=100_000)
    initial_agents: int = Field(alias="initialAgents", ge=0, le=10_000)
    obstacle_count: int = Field(alias="obstacleCount", ge=0, le=10_000)
    resource_count: int = Field(alias="resourceCount", ge=0, le=10_000)

    @classmethod
    def from_config(cls, cfg: SimulationConfig) -> SimulationConfigSchema:
        return cls(
            speed=cfg.speed,
            world_size=cfg.world_size,
            initial_agents=cfg.initial_agents,
            obstacle_count=cfg.obstacle_count,
            resource_count=cfg.resource_count,
        )

    def to_config(self) -> SimulationConfig:
        return SimulationConfig(
            speed=self.speed,
            world_size=self.world_size,
            initial_agents=self.initial_agents,
            obstacle_count=self.obstacle_count,
            resource_count=self.resource_count,
        )


class EnvironmentalFactorsSchema(_Schema):
    temperature: float = Field(allow_inf_nan=False)
    food_availability: float = Field(alias="foodAvailability", ge=0.0, allow_inf_nan=False)
    predator_presence: float = Field(alias="predatorPresence", ge=0.0, le=10.0, allow_inf_nan=False)

    @classmethod
    def from_factors(cls, factors: EnvironmentalFactors) -> EnvironmentalFactorsSchema:
        return cls(
            temperature=factors.temperature,
            food_availability=factors.food_availability,
            predator_presence=factors.predator_presence,
        )

    def to_factors(self) -> EnvironmentalFactors:
        return EnvironmentalFactors(
            temperature=self.temperature,
            food_availability=self.food_availability,
            predator_presence=self.predator_presence,
        )


class TimeStepSchema(_Schema):
    time_step: int = Field(alias="timeStep", ge=1, le=1000)


# --- Control / persistence ---

class MessageResponse(BaseModel):
    message: str


class ControlResponse(_Schema):
    status: str
    message: str
    tick: int
    running: bool = Field(alias="isRunning")


class SaveResponse(_Schema):
    message: str
    snapshot_id: int = Field(alias="snapshotId")


class LoadResponse(_Schema):
    state: WorldStateResponse
    config: SimulationConfigSchema
    time_step: int = Field(alias="timeStep")
    created_at: str = Field(alias="createdAt")
