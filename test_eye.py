import math
import unittest

from eye import Eye, wrap_angle
from world import Food


class TestWrapAngle(unittest.TestCase):

    def test_range_is_half_open_at_minus_pi(self):
        self.assertAlmostEqual(wrap_angle(-math.pi), math.pi)
        self.assertAlmostEqual(wrap_angle(math.pi), math.pi)

    def test_wraps_full_turns(self):
        self.assertAlmostEqual(wrap_angle(0.5 + 4 * math.pi), 0.5)
        self.assertAlmostEqual(wrap_angle(-1.5 * math.pi), 0.5 * math.pi)
        self.assertEqual(wrap_angle(0.0), 0.0)


class TestEye(unittest.TestCase):

    def setUp(self):
        # Half-angle π/2: the eye sees everything in front of it
        self.eye = Eye(fov_range=0.25, fov_half_angle=math.pi / 2, cells=9)
        self.position = (0.5, 0.5)

    def look(self, *food_positions, rotation=0.0):
        foods = [Food(p) for p in food_positions]
        return self.eye.process_vision(self.position, rotation, foods)

    def test_invalid_geometry_rejected(self):
        with self.assertRaises(ValueError):
            Eye(fov_range=0.0)
        with self.assertRaises(ValueError):
            Eye(fov_half_angle=-1.0)
        with self.assertRaises(ValueError):
            Eye(cells=0)

    def test_no_food_sees_nothing(self):
        self.assertEqual(self.look().tolist(), [0.0] * 9)

    def test_food_on_top_is_full_energy_in_middle(self):
        vision = self.look((0.5, 0.5))
        self.assertAlmostEqual(vision[4], 1.0)
        self.assertAlmostEqual(vision.sum(), 1.0)

    def test_food_at_edge_of_range_is_zero_energy(self):
        vision = self.look((0.5, 0.75))
        self.assertAlmostEqual(vision.sum(), 0.0)

    def test_food_out_of_range_ignored(self):
        vision = self.look((0.5, 0.8))
        self.assertEqual(vision.tolist(), [0.0] * 9)

    def test_food_straight_ahead(self):
        vision = self.look((0.5, 0.6))
        self.assertAlmostEqual(vision[4], 0.6)

    def test_food_behind_ignored(self):
        vision = self.look((0.5, 0.4))
        self.assertAlmostEqual(vision.sum(), 0.0)

    def test_left_and_right_land_in_outer_cells(self):
        # Heading +y: counter-clockwise (−x side) is the positive-angle end
        left = self.look((0.42, 0.51))
        right = self.look((0.58, 0.51))
        expected = (0.25 - math.hypot(0.08, 0.01)) / 0.25
        self.assertAlmostEqual(left[8], expected)
        self.assertAlmostEqual(right[0], expected)
        self.assertAlmostEqual(left.sum(), left[8])
        self.assertAlmostEqual(right.sum(), right[0])

    def test_rotation_turns_the_view(self):
        # Facing −x, food at −x is straight ahead
        vision = self.look((0.4, 0.5), rotation=math.pi / 2)
        self.assertAlmostEqual(vision[4], 0.6)

    def test_energy_accumulates(self):
        vision = self.look((0.5, 0.6), (0.5, 0.6))
        self.assertAlmostEqual(vision[4], 1.2)

    def test_default_eye_is_wider_than_half_turn(self):
        eye = Eye()
        self.assertEqual(eye.cells, 9)
        # About 101° off the heading: inside the default 112.5° half-angle
        vision = eye.process_vision((0.5, 0.5), 0.0, [Food((0.45, 0.49))])
        self.assertGreater(vision[8], 0.0)
        # 135° off the heading: outside
        vision = eye.process_vision((0.5, 0.5), 0.0, [Food((0.45, 0.45))])
        self.assertEqual(vision.sum(), 0.0)


if __name__ == '__main__':
    unittest.main()
