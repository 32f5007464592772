import random
import unittest
from collections import Counter

import numpy as np

from falling_blocks_rl.game import BASE_SHAPES, TetrominoType, random_kind, rotate_shape, shape_for


class TestPieceCatalog(unittest.TestCase):
    def test_catalog_has_seven_four_cell_kinds(self):
        self.assertEqual(len(BASE_SHAPES), 7)
        for kind in TetrominoType:
            shape = shape_for(kind)
            self.assertEqual(int(shape.sum()), 4, kind.name)
            h, w = shape.shape
            self.assertIn(h, (1, 2))
            self.assertIn(w, (2, 3, 4))

    def test_base_shapes_match_canonical_layouts(self):
        np.testing.assert_array_equal(shape_for(TetrominoType.I), [[1, 1, 1, 1]])
        np.testing.assert_array_equal(shape_for(TetrominoType.O), [[1, 1], [1, 1]])
        np.testing.assert_array_equal(shape_for(TetrominoType.T), [[0, 1, 0], [1, 1, 1]])
        np.testing.assert_array_equal(shape_for(TetrominoType.L), [[0, 0, 1], [1, 1, 1]])

    def test_shapes_are_read_only(self):
        shape = shape_for(TetrominoType.T)
        with self.assertRaises(ValueError):
            shape[0, 0] = True

    def test_unknown_kind_raises(self):
        with self.assertRaises(ValueError):
            shape_for(99)

    def test_rotation_maps_cell_yx_to_x_n_minus_1_minus_y(self):
        rotated = rotate_shape(shape_for(TetrominoType.T))
        np.testing.assert_array_equal(rotated, [[1, 0], [1, 1], [1, 0]])
        self.assertEqual(rotate_shape(shape_for(TetrominoType.I)).shape, (4, 1))

    def test_four_rotations_return_to_base(self):
        for kind in TetrominoType:
            shape = shape_for(kind)
            turned = shape
            for _ in range(4):
                turned = rotate_shape(turned)
            np.testing.assert_array_equal(turned, shape)

    def test_random_kind_uses_injected_source(self):
        class Fixed:
            def choice(self, seq):
                return seq[-1]

        self.assertIs(random_kind(Fixed()), TetrominoType.L)

    def test_random_kind_is_roughly_uniform(self):
        rng = random.Random(0)
        counts = Counter(random_kind(rng) for _ in range(7000))
        self.assertEqual(set(counts), set(TetrominoType))
        for kind, count in counts.items():
            self.assertGreater(count, 800, kind.name)
            self.assertLess(count, 1200, kind.name)


if __name__ == "__main__":
    unittest.main()
