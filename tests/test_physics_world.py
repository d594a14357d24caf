"""Tests for the PyBullet collision world: layers, masks and batched rays."""

import numpy as np
import pytest

from animlab.modules.physics_world import PhysicsWorld, layer_mask


class TestLayerMask:

    def test_single_layer(self):
        assert layer_mask(0) == 1
        assert layer_mask(3) == 8

    def test_combined_layers(self):
        assert layer_mask(0, 2) == 0b101

    def test_out_of_range_layer_raises(self):
        with pytest.raises(ValueError, match="out of range"):
            layer_mask(31)


class TestPhysicsWorld:

    def test_not_setup_initially(self):
        world = PhysicsWorld()
        assert world.client is None
        with pytest.raises(RuntimeError, match="setup"):
            world.raycast([0, 1, 0], [0, -1, 0], 2.0)

    def test_ray_through_ground_hits(self, physics_world):
        assert physics_world.raycast([0, 0.1, 0], [0, -1, 0], 0.2)

    def test_ray_stopping_short_misses(self, physics_world):
        assert not physics_world.raycast([0, 0.5, 0], [0, -1, 0], 0.2)

    def test_ray_pointing_away_misses(self, physics_world):
        assert not physics_world.raycast([0, 0.1, 0], [0, 1, 0], 0.2)

    def test_direction_length_does_not_scale_ray(self, physics_world):
        assert not physics_world.raycast([0, 0.5, 0], [0, -10, 0], 0.2)

    def test_zero_direction_never_hits(self, physics_world):
        assert not physics_world.raycast([0, 0.1, 0], [0, 0, 0], 0.2)

    def test_mask_filters_layers(self, physics_world):
        assert physics_world.raycast([0, 0.1, 0], [0, -1, 0], 0.2, mask=layer_mask(0))
        assert not physics_world.raycast([0, 0.1, 0], [0, -1, 0], 0.2, mask=layer_mask(1))

    def test_box_on_other_layer(self, physics_world):
        physics_world.add_box("crate", [0.5, 0.5, 0.5], [5.0, 0.5, 0.0], layer=4)
        origin, down = [5.0, 1.1, 0.0], [0, -1, 0]
        assert physics_world.raycast(origin, down, 0.2, mask=layer_mask(4))
        assert not physics_world.raycast(origin, down, 0.2, mask=layer_mask(0))
        assert "crate" in physics_world.colliders

    def test_batch_larger_than_one_query(self, physics_world):
        n = 2500
        origins = np.zeros((n, 3))
        origins[:, 1] = np.where(np.arange(n) % 2 == 0, 0.1, 0.5)
        directions = np.tile([0.0, -1.0, 0.0], (n, 1))
        hits = physics_world.raycast_batch(origins, directions, 0.2)
        assert hits.shape == (n,)
        assert hits[::2].all()
        assert not hits[1::2].any()

    def test_context_manager_cleans_up(self):
        with PhysicsWorld() as world:
            assert world.client is not None
        assert world.client is None
