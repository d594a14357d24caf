"""Synthetic clips and collision worlds shared by the test modules."""

import numpy as np
import pytest

from animlab.modules.motion_data import MotionClip
from animlab.modules.motion_data.transforms import compose
from animlab.modules.physics_world import PhysicsWorld

HIPS, LEFT_FOOT, RIGHT_FOOT = 0, 1, 2
NAMES = ["Hips", "LeftFoot", "RightFoot"]
SYMMETRY = [0, 2, 1]
FRAMERATE = 30.0
SPEED = 1.0          # hips walk along +Z in m/s
CONTACT_FRAME = 50


def make_clip(frames: int = 100, framerate: float = FRAMERATE, hips_x: float = 0.0,
              left_heights=None, right_heights=None) -> MotionClip:
    """Hips walking forward at 1 m/s; feet hover at 0.5 m unless heights are given."""
    t = np.arange(frames) / framerate
    left = np.full(frames, 0.5) if left_heights is None else np.asarray(left_heights, dtype=float)
    right = np.full(frames, 0.5) if right_heights is None else np.asarray(right_heights, dtype=float)

    positions = np.zeros((frames, 3, 3))
    positions[:, HIPS] = np.stack([np.full(frames, hips_x), np.full(frames, 1.0), SPEED * t], axis=1)
    positions[:, LEFT_FOOT] = np.stack([np.full(frames, -0.1), left, SPEED * t], axis=1)
    positions[:, RIGHT_FOOT] = np.stack([np.full(frames, 0.1), right, SPEED * t], axis=1)
    rotations = np.broadcast_to(np.eye(3), (frames, 3, 3, 3))
    return MotionClip(compose(positions, rotations), framerate=framerate,
                      names=NAMES, symmetry=SYMMETRY, hips=HIPS, name="walk")


class PlaneWorld:
    """Collision world with one horizontal plane at y = height on layer 0."""

    def __init__(self, height: float = 0.0, layer: int = 0):
        self.height = height
        self.layer = layer
        self.calls = 0

    def raycast(self, origin, direction, max_distance, mask=-1):
        return bool(self.raycast_batch(np.asarray(origin)[None], np.asarray(direction)[None],
                                       max_distance, mask)[0])

    def raycast_batch(self, origins, directions, max_distance, mask=-1):
        self.calls += 1
        origins = np.asarray(origins, dtype=float)
        directions = np.asarray(directions, dtype=float)
        unit = directions / np.linalg.norm(directions, axis=1, keepdims=True)
        ends = origins + unit * max_distance
        crosses = (origins[:, 1] - self.height) * (ends[:, 1] - self.height) <= 0
        return crosses & bool(mask & (1 << self.layer))


@pytest.fixture
def clip():
    heights = np.full(100, 0.5)
    heights[CONTACT_FRAME] = 0.02
    return make_clip(left_heights=heights)


@pytest.fixture
def plane_world():
    return PlaneWorld()


@pytest.fixture
def physics_world():
    world = PhysicsWorld()
    assert world.setup()
    world.add_ground(0.0, layer=0)
    yield world
    world.cleanup()
