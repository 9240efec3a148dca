import math
import unittest

import numpy as np

from creature import Animal, AnimalIndividual, Brain
from distribution import DistributionError, PointDistributor
from eye import Eye
from neural_network import NeuralNetwork
from simulation import Simulation
from world import Food, SpatialGrid, World, wrap_unit


def make_sim(seed=0, **kwargs):
    rng = np.random.default_rng(seed)
    kwargs.setdefault("verbose", False)
    return rng, Simulation.random(rng, **kwargs)


class TestWorld(unittest.TestCase):

    def test_random_world_sizes(self):
        world = World.random(np.random.default_rng(0))
        self.assertEqual(len(world.animals), 35)
        self.assertEqual(len(world.foods), 50)

    def test_wrap_unit(self):
        self.assertAlmostEqual(wrap_unit(1.25), 0.25)
        self.assertAlmostEqual(wrap_unit(-0.25), 0.75)
        self.assertEqual(wrap_unit(-1e-18), 0.0)
        self.assertEqual(wrap_unit(0.5), 0.5)

    def test_snapshot(self):
        world = World.random(np.random.default_rng(0), num_animals=3, num_foods=4)
        frame = world.snapshot()
        self.assertEqual(len(frame["animals"]), 3)
        self.assertEqual(len(frame["foods"]), 4)
        self.assertEqual(set(frame["animals"][0]), {"x", "y", "rotation", "color"})

    def test_spatial_grid_nearby(self):
        grid = SpatialGrid(0.1)
        grid.add(0, (0.05, 0.05))
        grid.add(1, (0.15, 0.05))
        grid.add(2, (0.55, 0.55))
        self.assertEqual(grid.nearby((0.06, 0.06)), [0, 1])
        grid.move(1, (0.15, 0.05), (0.5, 0.5))
        self.assertEqual(grid.nearby((0.06, 0.06)), [0])
        self.assertEqual(grid.nearby((0.52, 0.52)), [1, 2])


class TestAnimalIndividual(unittest.TestCase):

    def test_bridge_round_trip(self):
        rng = np.random.default_rng(2)
        animal = Animal.random(rng, (0.5, 0.5))
        animal.satiation = 4

        individual = AnimalIndividual.from_animal(animal)
        self.assertEqual(individual.fitness(), 4.0)
        self.assertEqual(len(individual.chromosome()), 9 * 18 + 18 + 18 * 2 + 2)

        child = individual.into_animal(rng, (0.1, 0.2))
        self.assertEqual(child.satiation, 0)
        self.assertEqual(child.as_chromosome(), individual.chromosome())
        np.testing.assert_array_equal(child.position, [0.1, 0.2])

    def test_create_starts_with_zero_fitness(self):
        chromosome = Brain.random(np.random.default_rng(0), Eye()).as_chromosome()
        self.assertEqual(AnimalIndividual.create(chromosome).fitness(), 0.0)


class TestSimulationTick(unittest.TestCase):

    def test_random_simulation(self):
        _, sim = make_sim()
        self.assertEqual(len(sim.world.animals), 35)
        self.assertEqual(len(sim.world.foods), 50)
        self.assertEqual(sim.age, 0)

    def test_step_mid_generation_returns_none(self):
        rng, sim = make_sim(generation_length=10)
        self.assertIsNone(sim.step(rng))
        self.assertEqual(sim.age, 1)

    def test_deterministic_for_seed(self):
        rng_a, sim_a = make_sim(7)
        rng_b, sim_b = make_sim(7)
        for _ in range(60):
            sim_a.step(rng_a)
            sim_b.step(rng_b)
        for a, b in zip(sim_a.world.animals, sim_b.world.animals):
            np.testing.assert_array_equal(a.position, b.position)
            self.assertEqual(a.rotation, b.rotation)
            self.assertEqual(a.satiation, b.satiation)

    def test_eating_relocates_food(self):
        rng, sim = make_sim(num_animals=1, num_foods=1)
        animal, food = sim.world.animals[0], sim.world.foods[0]
        food.position = animal.position.copy()

        sim._process_collisions(rng)

        self.assertEqual(animal.satiation, 1)
        self.assertGreater(np.linalg.norm(food.position - animal.position), 0.0)

    def test_food_out_of_reach_not_eaten(self):
        rng, sim = make_sim(num_animals=1, num_foods=1)
        animal, food = sim.world.animals[0], sim.world.foods[0]
        food.position = animal.position + np.array([0.02, 0.0])
        before = food.position.copy()

        sim._process_collisions(rng)

        self.assertEqual(animal.satiation, 0)
        np.testing.assert_array_equal(food.position, before)

    def test_speed_stays_in_bounds(self):
        _, sim = make_sim()
        for animal in sim.world.animals:
            animal.speed = 1.0
        sim._process_brains()
        for animal in sim.world.animals:
            self.assertGreaterEqual(animal.speed, sim.speed_min)
            self.assertLessEqual(animal.speed, sim.speed_max)

    def test_brain_outputs_clamped_to_acceleration_limits(self):
        _, sim = make_sim(num_animals=1)
        eye = Eye()
        topology = Brain.topology(eye)
        # Hidden layer silent; both outputs driven by a bias far above the limits
        hidden = [0.0] * (topology[1] * (topology[0] + 1))
        output = ([10.0] + [0.0] * topology[1]) * topology[2]
        brain = Brain(NeuralNetwork.from_weights(hidden + output, topology))
        animal = Animal((0.5, 0.5), 0.3, 0.002, eye, brain)
        sim.world.animals = [animal]

        sim._process_brains()

        self.assertAlmostEqual(animal.rotation, 0.3 + sim.rotation_accel)
        self.assertEqual(animal.speed, sim.speed_max)

    def test_wraps_past_right_and_top_edges(self):
        _, sim = make_sim(num_animals=2)
        east, north = sim.world.animals
        east.position[:] = (0.999, 0.5)
        east.rotation, east.speed = -math.pi / 2, 0.005
        north.position[:] = (0.5, 0.998)
        north.rotation, north.speed = 0.0, 0.005

        sim._process_movements()

        self.assertAlmostEqual(east.position[0], 0.004)
        self.assertAlmostEqual(east.position[1], 0.5)
        self.assertAlmostEqual(north.position[0], 0.5)
        self.assertAlmostEqual(north.position[1], 0.003)

    def test_wraps_past_left_and_bottom_edges(self):
        _, sim = make_sim(num_animals=2)
        west, south = sim.world.animals
        west.position[:] = (0.001, 0.5)
        west.rotation, west.speed = math.pi / 2, 0.005
        south.position[:] = (0.5, 0.002)
        south.rotation, south.speed = math.pi, 0.005

        sim._process_movements()

        self.assertAlmostEqual(west.position[0], 0.996)
        self.assertAlmostEqual(south.position[1], 0.997)
        for animal in (west, south):
            self.assertTrue(0.0 <= animal.position[0] < 1.0)
            self.assertTrue(0.0 <= animal.position[1] < 1.0)


class TestSimulationEvolution(unittest.TestCase):

    def test_generation_boundary(self):
        rng, sim = make_sim(generation_length=3)
        sim.world.animals[0].satiation = 5

        self.assertIsNone(sim.step(rng))
        self.assertIsNone(sim.step(rng))
        stats = sim.step(rng)

        self.assertIsNotNone(stats)
        self.assertEqual(stats["generation"], 0)
        self.assertEqual(stats["population"], 35)
        self.assertGreaterEqual(stats["max_fitness"], 5)
        self.assertEqual(sim.age, 0)
        self.assertEqual(sim.generation, 1)
        self.assertEqual(len(sim.world.animals), 35)
        self.assertTrue(all(a.satiation == 0 for a in sim.world.animals))
        self.assertEqual(sim.stats, [stats])

    def test_evolution_leaves_food_alone(self):
        rng, sim = make_sim()
        before = [f.position.copy() for f in sim.world.foods]
        sim._evolve(rng)
        for food, position in zip(sim.world.foods, before):
            np.testing.assert_array_equal(food.position, position)

    def test_offspring_are_spread_out(self):
        rng, sim = make_sim()
        sim._evolve(rng)
        positions = [a.position for a in sim.world.animals]
        for i in range(len(positions)):
            for j in range(i + 1, len(positions)):
                self.assertGreater(np.linalg.norm(positions[i] - positions[j]), 0.1)

    def test_offspring_start_at_initial_speed_with_new_heading(self):
        rng, sim = make_sim()
        for animal in sim.world.animals:
            animal.speed = sim.speed_max
            animal.rotation = 0.25
        sim._evolve(rng)
        rotations = [a.rotation for a in sim.world.animals]
        for animal in sim.world.animals:
            self.assertEqual(animal.speed, sim.initial_speed)
            self.assertTrue(-math.pi <= animal.rotation < math.pi)
        self.assertNotIn(0.25, rotations)
        self.assertGreater(len(set(rotations)), 1)

    def test_failed_placement_leaves_generation_intact(self):
        rng, sim = make_sim(generation_length=2)
        old_animals = list(sim.world.animals)
        # 35 animals cannot be spread 0.5 apart in the unit square
        sim.animal_min_distance = 0.5
        sim.distributor = PointDistributor(max_attempts=500)

        self.assertIsNone(sim.step(rng))
        with self.assertRaises(DistributionError):
            sim.step(rng)

        self.assertEqual(sim.age, 2)
        self.assertEqual(sim.generation, 0)
        self.assertEqual(sim.stats, [])
        self.assertEqual(len(sim.world.animals), len(old_animals))
        for current, old in zip(sim.world.animals, old_animals):
            self.assertIs(current, old)

    def test_train_runs_one_generation(self):
        seen = []
        rng, sim = make_sim(generation_length=4,
                            on_gen_callback=lambda g, s, w: seen.append(g))
        stats = sim.train(rng)
        self.assertEqual(stats["generation"], 0)
        sim.train(rng)
        self.assertEqual(seen, [0, 1])
        self.assertEqual(sim.generation, 2)

    def test_grid_collisions_match_brute_force(self):
        rng_a, brute = make_sim(3, eat_radius=0.05)
        rng_b, grid = make_sim(3, eat_radius=0.05, use_grid=True)
        for _ in range(80):
            brute.step(rng_a)
            grid.step(rng_b)
        self.assertGreater(sum(a.satiation for a in brute.world.animals), 0)
        for a, b in zip(brute.world.animals, grid.world.animals):
            self.assertEqual(a.satiation, b.satiation)
            np.testing.assert_array_equal(a.position, b.position)
        for a, b in zip(brute.world.foods, grid.world.foods):
            np.testing.assert_array_equal(a.position, b.position)

    def test_empty_world_cannot_evolve(self):
        rng, sim = make_sim(num_animals=0, generation_length=1)
        with self.assertRaises(ValueError):
            sim.step(rng)


if __name__ == '__main__':
    unittest.main()
