"""Tests for the BehaviorEngine phases.

Each phase is exercised on its own against a hand-built world so the
expected outcome does not depend on generated positions.
"""

import sys
import os
from dataclasses import replace

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from birdsim.config import BehaviorRules
from birdsim.core.enums import AgentState, ResourceType
from birdsim.core.models import Agent, Obstacle, Predator, Resource, Vector2, Zone
from birdsim.core.world_state import WorldState
from birdsim.engine.behavior import ORIGIN, BehaviorEngine, escape_target
from birdsim.systems.generator import default_zones
from birdsim.systems.rng import DeterministicRNG

MIGRATING = AgentState.MIGRATING
SEARCHING = AgentState.SEARCHING_FOOD
RESTING = AgentState.RESTING


def _world(tick: int = 1, size: int = 1000) -> WorldState:
    world = WorldState(seed=42, world_size=size)
    world.tick = tick
    return world


def _agent(aid: int, x: float, y: float, state=MIGRATING, group: int = 0, target=None) -> Agent:
    return Agent(
        id=aid,
        position=Vector2(x, y),
        velocity=Vector2(),
        state=state,
        target=target if target is not None else Vector2(x, y),
        group=group,
    )


def _resource(rid: int, x: float, y: float, kind: ResourceType, current: int, capacity: int = 5) -> Resource:
    return Resource(id=rid, position=Vector2(x, y), type=kind, capacity=capacity, current=current)


def _zone(temperature=20.0, food=1.0, predators=0.0) -> Zone:
    return Zone(id=0, position=Vector2(500, 500), temperature=temperature,
                food_availability=food, predator_presence=predators)


def _engine(**overrides) -> BehaviorEngine:
    return BehaviorEngine(replace(BehaviorRules(), **overrides), DeterministicRNG(42))


class TestEnvironmentalOverride:

    @pytest.mark.parametrize("zone, expected", [
        (_zone(temperature=5.0), MIGRATING),
        (_zone(food=0.2), SEARCHING),
        (_zone(predators=0.8), RESTING),
        (_zone(temperature=5.0, food=0.2, predators=0.8), MIGRATING),
    ])
    def test_nearest_zone_forces_state(self, zone, expected):
        world = _world()
        world.zones = [zone]
        world.agents = [_agent(0, 490, 500, state=RESTING if expected is not RESTING else MIGRATING)]
        _engine().apply_environment(world)
        assert world.agents[0].state is expected

    def test_mild_zone_leaves_state_alone(self):
        world = _world()
        world.zones = [_zone()]
        world.agents = [_agent(0, 10, 10, state=SEARCHING)]
        _engine().apply_environment(world)
        assert world.agents[0].state is SEARCHING

    def test_no_zones_is_a_no_op(self):
        world = _world()
        world.agents = [_agent(0, 10, 10, state=RESTING)]
        _engine().apply_environment(world)
        assert world.agents[0].state is RESTING


class TestGroupSteering:

    def test_members_fly_toward_centroid(self):
        world = _world()
        world.agents = [_agent(0, 100, 100), _agent(1, 110, 100)]
        _engine().steer_groups(world, time_step=1)
        assert world.agents[0].position == Vector2(101, 100)
        assert world.agents[0].velocity == Vector2(1, 0)
        assert world.agents[1].position == Vector2(109, 100)

    def test_time_step_scales_movement(self):
        world = _world()
        world.agents = [_agent(0, 100, 100), _agent(1, 120, 100)]
        _engine().steer_groups(world, time_step=3)
        assert world.agents[0].position == Vector2(103, 100)

    def test_non_migrating_agents_do_not_move(self):
        world = _world()
        world.agents = [_agent(0, 100, 100), _agent(1, 200, 200, state=RESTING)]
        _engine().steer_groups(world, time_step=1)
        assert world.agents[1].position == Vector2(200, 200)
        # A lone migrating member steers toward itself and stays put
        assert world.agents[0].position == Vector2(100, 100)

    def test_group_without_migrants_gets_random_target(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=RESTING, group=3)]
        targets = _engine().group_targets(world)
        assert set(targets) == {3}
        assert world.in_bounds(targets[3])

    def test_classic_mode_steers_to_own_target(self):
        world = _world()
        world.agents = [
            _agent(0, 100, 100, target=Vector2(100, 200)),
            _agent(1, 300, 300, target=Vector2(200, 300)),
        ]
        _engine().steer_groups(world, time_step=1, use_groups=False)
        assert world.agents[0].position == Vector2(100, 101)
        assert world.agents[1].position == Vector2(299, 300)

    def test_movement_is_clamped(self):
        world = _world(size=100)
        world.agents = [_agent(0, 0.2, 50), _agent(1, 0.0, 50)]
        _engine().steer_groups(world, time_step=5)
        for agent in world.agents:
            assert world.in_bounds(agent.position)


class TestObstacleEvasion:

    def test_velocity_points_away(self):
        world = _world()
        world.obstacles = [Obstacle(id=0, position=Vector2(105, 100), radius=5)]
        world.agents = [_agent(0, 100, 100)]
        _engine().evade_obstacles(world)
        assert world.agents[0].velocity == Vector2(-0.5, 0)
        assert world.agents[0].position == Vector2(100, 100)

    def test_outside_margin_is_ignored(self):
        world = _world()
        world.obstacles = [Obstacle(id=0, position=Vector2(150, 100), radius=5)]
        world.agents = [_agent(0, 100, 100)]
        _engine().evade_obstacles(world)
        assert world.agents[0].velocity == Vector2()

    def test_resting_agents_are_exempt(self):
        world = _world()
        world.obstacles = [Obstacle(id=0, position=Vector2(105, 100), radius=5)]
        world.agents = [_agent(0, 100, 100, state=RESTING)]
        _engine().evade_obstacles(world)
        assert world.agents[0].velocity == Vector2()


class TestMigratingChecks:

    def test_rest_claim_on_rest_tick(self):
        world = _world(tick=500)
        spot = _resource(1, 120, 100, ResourceType.REST, current=0)
        world.resources = [spot]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is RESTING
        assert spot.current == 1

    def test_rest_claim_skipped_on_cooldown(self):
        world = _world(tick=500)
        world.resources = [_resource(1, 120, 100, ResourceType.REST, current=0)]
        world.agents = [_agent(0, 100, 100)]
        world.agents[0].collision_tick = 499
        _engine().check_migrating(world)
        assert world.agents[0].state is MIGRATING

    def test_rest_claim_needs_proximity(self):
        world = _world(tick=500)
        world.resources = [_resource(1, 400, 100, ResourceType.REST, current=0)]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is MIGRATING

    def test_food_claim_on_food_tick(self):
        world = _world(tick=300)
        food = _resource(1, 130, 100, ResourceType.FOOD, current=2)
        world.resources = [food]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is SEARCHING
        assert world.agents[0].target == food.position
        assert food.current == 3

    def test_full_food_is_not_claimed(self):
        world = _world(tick=300)
        world.resources = [_resource(1, 130, 100, ResourceType.FOOD, current=5)]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is MIGRATING

    def test_rest_check_wins_when_both_due(self):
        world = _world(tick=1500)
        spot = _resource(1, 110, 100, ResourceType.REST, current=0)
        food = _resource(2, 120, 100, ResourceType.FOOD, current=1)
        world.resources = [spot, food]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is RESTING
        assert food.current == 1

    def test_off_ticks_do_nothing(self):
        world = _world(tick=301)
        world.resources = [_resource(1, 110, 100, ResourceType.REST, current=0)]
        world.agents = [_agent(0, 100, 100)]
        _engine().check_migrating(world)
        assert world.agents[0].state is MIGRATING


class TestRestingCheck:

    def test_wake_up_on_separation_tick(self):
        world = _world(tick=3000)
        spot = _resource(1, 505, 500, ResourceType.REST, current=2)
        world.resources = [spot]
        world.agents = [_agent(0, 500, 500, state=RESTING)]
        _engine().check_resting(world)
        agent = world.agents[0]
        assert agent.state is MIGRATING
        assert agent.target.distance_to(agent.position) < 10
        assert spot.current == 1

    def test_no_wake_up_between_separation_ticks(self):
        world = _world(tick=2999)
        world.agents = [_agent(0, 500, 500, state=RESTING)]
        _engine().check_resting(world)
        assert world.agents[0].state is RESTING

    def test_wake_up_without_rest_spot(self):
        world = _world(tick=6000)
        world.agents = [_agent(0, 500, 500, state=RESTING)]
        _engine().check_resting(world)
        assert world.agents[0].state is MIGRATING


class TestSearchingCheck:

    def test_eat_on_arrival(self):
        world = _world()
        food = _resource(1, 105, 100, ResourceType.FOOD, current=5)
        world.resources = [food]
        world.agents = [_agent(0, 100, 100, state=SEARCHING)]
        _engine().check_searching(world, time_step=1)
        agent = world.agents[0]
        assert agent.position == Vector2(101, 100)
        assert food.current == 4
        assert agent.state is MIGRATING
        assert world.in_bounds(agent.target)

    def test_keep_flying_when_far(self):
        world = _world()
        food = _resource(1, 200, 100, ResourceType.FOOD, current=5)
        world.resources = [food]
        world.agents = [_agent(0, 100, 100, state=SEARCHING)]
        _engine().check_searching(world, time_step=1)
        agent = world.agents[0]
        assert agent.state is SEARCHING
        assert agent.target == food.position
        assert food.current == 5

    def test_depleted_food_moves_and_refills(self):
        world = _world()
        food = _resource(1, 105, 100, ResourceType.FOOD, current=1)
        world.resources = [food]
        world.agents = [_agent(0, 100, 100, state=SEARCHING)]
        _engine().check_searching(world, time_step=1)
        assert food.current == food.capacity
        assert food.position != Vector2(105, 100)
        assert world.in_bounds(food.position)

    def test_no_food_anywhere_wanders(self):
        world = _world()
        world.resources = [_resource(1, 105, 100, ResourceType.FOOD, current=0)]
        world.agents = [_agent(0, 100, 100, state=SEARCHING)]
        _engine().check_searching(world, time_step=1)
        agent = world.agents[0]
        assert agent.state is SEARCHING
        assert agent.position == Vector2(100, 100)
        assert world.in_bounds(agent.target)


class TestFoodDepletion:

    def test_depleted_shared_food_moves_to_best_zone(self):
        world = _world()
        world.zones = default_zones(1000)
        shared = _resource(0, 900, 900, ResourceType.FOOD, current=0)
        world.resources = [shared]
        world.agents = [_agent(0, 10, 10, state=RESTING), _agent(1, 20, 20, state=SEARCHING)]
        _engine().handle_food_depletion(world)
        assert shared.current == shared.capacity
        assert 0 <= shared.position.x < 500 and 0 <= shared.position.y < 500
        for agent in world.agents:
            assert agent.state is MIGRATING
            assert agent.target == shared.position

    def test_stocked_shared_food_is_left_alone(self):
        world = _world()
        shared = _resource(0, 900, 900, ResourceType.FOOD, current=3)
        world.resources = [shared]
        world.agents = [_agent(0, 10, 10, state=RESTING)]
        _engine().handle_food_depletion(world)
        assert shared.position == Vector2(900, 900)
        assert world.agents[0].state is RESTING

    def test_missing_resources_recreate_shared_food(self):
        world = _world()
        world.agents = [_agent(0, 10, 10)]
        _engine().handle_food_depletion(world)
        assert world.shared_food is not None
        assert world.shared_food.current == world.shared_food.capacity


class TestRandomTransitions:

    def _resources(self, n: int) -> list[Resource]:
        return [_resource(i, 10 * i, 10, ResourceType.REST, current=0) for i in range(1, n + 1)]

    def test_searching_limit_caps_new_searchers(self):
        world = _world()
        world.resources = self._resources(8)
        world.agents = [_agent(i, 100 + 20 * i, 100) for i in range(5)]
        _engine(start_searching_chance=1.0).random_transitions(world)
        assert sum(a.state is SEARCHING for a in world.agents) == 2

    def test_no_searchers_without_resources(self):
        world = _world()
        world.agents = [_agent(i, 100 + 20 * i, 100) for i in range(5)]
        _engine(start_searching_chance=1.0).random_transitions(world)
        assert all(a.state is MIGRATING for a in world.agents)

    def test_arrived_searcher_resumes_migrating(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=SEARCHING, target=Vector2(103, 100))]
        _engine(resume_migrating_after_eating_chance=1.0).random_transitions(world)
        assert world.agents[0].state is MIGRATING

    def test_arrived_searcher_rests(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=SEARCHING, target=Vector2(103, 100))]
        _engine(resume_migrating_after_eating_chance=0.0).random_transitions(world)
        assert world.agents[0].state is RESTING

    def test_far_searcher_keeps_searching(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=SEARCHING, target=Vector2(300, 100))]
        _engine(resume_migrating_after_eating_chance=1.0).random_transitions(world)
        assert world.agents[0].state is SEARCHING

    def test_resting_agent_takes_off(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=RESTING)]
        _engine(stop_resting_chance=1.0).random_transitions(world)
        assert world.agents[0].state is MIGRATING
        assert world.in_bounds(world.agents[0].target)

    def test_resting_agent_stays_with_zero_chance(self):
        world = _world()
        world.agents = [_agent(0, 100, 100, state=RESTING)]
        _engine(stop_resting_chance=0.0).random_transitions(world)
        assert world.agents[0].state is RESTING


class TestPredators:

    def test_predators_move_and_clamp(self):
        world = _world(size=100)
        world.predators = [
            Predator(id=0, position=Vector2(50, 50), velocity=Vector2(1, 0)),
            Predator(id=1, position=Vector2(99.8, 50), velocity=Vector2(0.5, 0)),
        ]
        _engine().move_predators(world, time_step=2)
        assert world.predators[0].position == Vector2(52, 50)
        assert world.predators[1].position == Vector2(100, 50)

    def test_nearby_agent_flees_to_nearest_flock(self):
        world = _world()
        world.predators = [Predator(id=0, position=Vector2(100, 100), velocity=Vector2())]
        world.agents = [
            _agent(0, 103, 100, state=RESTING, group=0),
            _agent(1, 500, 500, group=1),
            _agent(2, 510, 500, group=1),
        ]
        _engine().move_predators(world, time_step=1)
        fleeing = world.agents[0]
        assert fleeing.state is MIGRATING
        assert fleeing.target == Vector2(505, 500)

    def test_distant_agents_are_unaffected(self):
        world = _world()
        world.predators = [Predator(id=0, position=Vector2(100, 100), velocity=Vector2())]
        world.agents = [_agent(0, 300, 300, state=RESTING)]
        _engine().move_predators(world, time_step=1)
        assert world.agents[0].state is RESTING


class TestEscapeTarget:

    def test_only_own_flock_heads_to_origin(self):
        agent = _agent(0, 100, 100, group=0)
        assert escape_target(agent, {0: Vector2(120, 100)}) == ORIGIN

    def test_no_flocks_heads_to_origin(self):
        assert escape_target(_agent(0, 100, 100), {}) == ORIGIN

    def test_nearest_flock_wins_including_own(self):
        agent = _agent(0, 100, 100, group=0)
        flocks = {0: Vector2(110, 100), 1: Vector2(800, 800)}
        assert escape_target(agent, flocks) == Vector2(110, 100)


class TestStep:

    def test_classic_rules_skip_zones_and_predators(self):
        world = _world(tick=1)
        world.zones = [_zone(temperature=-10.0)]
        world.predators = [Predator(id=0, position=Vector2(10, 10), velocity=Vector2(1, 1))]
        world.agents = [_agent(0, 100, 100, state=RESTING)]
        engine = BehaviorEngine(replace(BehaviorRules.classic(), stop_resting_chance=0.0), DeterministicRNG(1))
        world.resources = [_resource(0, 900, 900, ResourceType.FOOD, current=5)]
        engine.step(world)
        assert world.agents[0].state is RESTING
        assert world.predators[0].position == Vector2(10, 10)
