"""Tests for world generation: counts, bounds, resource layout, rule sets."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from birdsim.config import BehaviorRules, EnvironmentalFactors, SimulationConfig
from birdsim.core.enums import AgentState, ResourceType
from birdsim.core.models import Vector2, Zone
from birdsim.core.serialization import world_to_dict
from birdsim.systems.generator import WorldGenerator, best_food_zone, default_zones, food_site
from birdsim.systems.rng import DeterministicRNG


def _generate(seed=42, rules=None, factors=None, **config):
    cfg = SimulationConfig(**config)
    return WorldGenerator(rules or BehaviorRules()).generate(seed, cfg, factors or EnvironmentalFactors())


class TestWorldGenerator:

    def test_small_world_counts(self):
        world = _generate(world_size=1000, initial_agents=10, obstacle_count=5, resource_count=5)
        assert len(world.agents) == 10
        assert len(world.obstacles) == 5
        assert len(world.resources) == 5
        assert world.tick == 0
        assert world.collision_count == 0

    def test_everything_in_bounds(self):
        world = _generate(world_size=300, initial_agents=60, obstacle_count=20, resource_count=10)
        for entity in [*world.agents, *world.obstacles, *world.resources, *world.predators]:
            assert world.in_bounds(entity.position), entity
        for agent in world.agents:
            assert world.in_bounds(agent.target)

    def test_resource_count_scales_with_population(self):
        world = _generate(initial_agents=60, resource_count=2)
        assert len(world.resources) == 20

    def test_shared_food_is_first_and_full(self):
        world = _generate(initial_agents=30, resource_count=6)
        shared = world.shared_food
        assert shared is world.resources[0]
        assert shared.type is ResourceType.FOOD
        assert shared.current == shared.capacity

    def test_other_resources_alternate(self):
        world = _generate(initial_agents=30, resource_count=6)
        for res in world.resources[1:]:
            expected = ResourceType.REST if res.id % 2 == 0 else ResourceType.FOOD
            assert res.type is expected
            if res.type is ResourceType.REST:
                assert res.current == 0
            else:
                assert res.current == res.capacity

    def test_shared_food_in_best_zone_quadrant(self):
        world = _generate(world_size=1000)
        pos = world.shared_food.position
        # Zone 0 (15°, food 1.0) is the best mild zone; it sits in the lower-left quadrant
        assert 0 <= pos.x < 500
        assert 0 <= pos.y < 500

    def test_first_third_searching(self):
        world = _generate(initial_agents=30)
        states = [a.state for a in world.agents]
        assert states[:10] == [AgentState.SEARCHING_FOOD] * 10
        assert all(s is AgentState.MIGRATING for s in states[10:])

    def test_group_ids_in_range(self):
        world = _generate(initial_agents=50)
        assert {a.group for a in world.agents} <= set(range(5))

    def test_tiny_population_has_one_group(self):
        world = _generate(initial_agents=7)
        assert {a.group for a in world.agents} == {0}

    def test_predator_count_has_floor_of_one(self):
        world = _generate(factors=EnvironmentalFactors(predator_presence=0.0))
        assert len(world.predators) == 1

    def test_predator_count_follows_presence(self):
        world = _generate(factors=EnvironmentalFactors(predator_presence=0.5))
        assert len(world.predators) == 5

    def test_zoned_world_has_four_zones(self):
        world = _generate(world_size=800)
        assert [z.position for z in world.zones] == [
            Vector2(200, 200), Vector2(600, 200), Vector2(200, 600), Vector2(600, 600),
        ]

    def test_classic_rules_have_no_zones_or_predators(self):
        world = _generate(rules=BehaviorRules.classic())
        assert world.zones == []
        assert world.predators == []
        assert world.shared_food is not None

    def test_same_seed_same_world(self):
        assert world_to_dict(_generate(seed=9)) == world_to_dict(_generate(seed=9))

    def test_different_seed_different_world(self):
        assert world_to_dict(_generate(seed=9)) != world_to_dict(_generate(seed=10))


class TestFoodSites:

    def test_best_zone_prefers_mild_and_rich(self):
        zones = default_zones(1000)
        assert best_food_zone(zones, BehaviorRules()).id == 0

    def test_best_zone_falls_back_to_first(self):
        zones = [
            Zone(id=3, position=Vector2(1, 1), temperature=30, food_availability=1.0, predator_presence=0),
            Zone(id=4, position=Vector2(2, 2), temperature=5, food_availability=0.9, predator_presence=0),
        ]
        assert best_food_zone(zones, BehaviorRules()).id == 3

    def test_best_zone_none_without_zones(self):
        assert best_food_zone([], BehaviorRules()) is None

    def test_food_site_in_zone_quadrant(self):
        rng = DeterministicRNG(1)
        zone = Zone(id=1, position=Vector2(750, 250), temperature=20, food_availability=1, predator_presence=0)
        for tick in range(50):
            site = food_site(rng, zone, 1000.0, tick)
            assert 500 <= site.x < 1000
            assert 0 <= site.y < 500

    def test_food_site_without_zone_anywhere(self):
        rng = DeterministicRNG(1)
        for tick in range(50):
            site = food_site(rng, None, 1000.0, tick)
            assert 0 <= site.x < 1000 and 0 <= site.y < 1000
