"""
#WHERE
    Used by clip.py (root derivation, mirroring), contact.py (pivot
    transforms) and the trajectory models.

#WHAT
    Homogeneous 4x4 transform helpers for Y-up clips: composition, mirror
    reflection, ground projection and axis-angle rotations.

#INPUT
    numpy arrays — single (4, 4) matrices or stacked (..., 4, 4).

#OUTPUT
    numpy arrays of the same leading shape.
"""
from __future__ import annotations

import numpy as np

from animlab.shared.constants import FORWARD_AXIS, UP_AXIS


def _norm(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    return v / (n + 1e-9)


def compose(position: np.ndarray, rotation: np.ndarray) -> np.ndarray:
    """Build (..., 4, 4) transforms from (..., 3) positions and (..., 3, 3) rotations."""
    position = np.asarray(position, dtype=np.float64)
    rotation = np.asarray(rotation, dtype=np.float64)
    out = np.zeros(position.shape[:-1] + (4, 4), dtype=np.float64)
    out[..., :3, :3] = rotation
    out[..., :3, 3] = position
    out[..., 3, 3] = 1.0
    return out


def get_position(matrix: np.ndarray) -> np.ndarray:
    return matrix[..., :3, 3]


def get_rotation(matrix: np.ndarray) -> np.ndarray:
    return matrix[..., :3, :3]


def mirror_matrix(axis: int) -> np.ndarray:
    """Reflection S with -1 on *axis*; ``S @ M @ S`` mirrors a world transform."""
    s = np.eye(4)
    s[axis, axis] = -1.0
    return s


def mirror_transforms(matrices: np.ndarray, axis: int) -> np.ndarray:
    """Reflect world transforms across the plane normal to *axis*.

    Conjugating by the reflection keeps the rotation block proper
    (det = +1), so mirrored joints are still valid rigid transforms.
    """
    s = mirror_matrix(axis)
    return s @ matrices @ s


def ground_projection(matrices: np.ndarray) -> np.ndarray:
    """Project transforms onto the ground plane.

    Position keeps its horizontal components; rotation becomes the yaw-only
    rotation whose forward axis is the original forward axis flattened onto
    the ground.  A forward axis pointing straight up or down falls back to
    world forward.
    """
    position = np.array(get_position(matrices), dtype=np.float64, copy=True)
    position[..., UP_AXIS] = 0.0

    forward = np.array(get_rotation(matrices)[..., :, FORWARD_AXIS], dtype=np.float64, copy=True)
    forward[..., UP_AXIS] = 0.0
    degenerate = np.linalg.norm(forward, axis=-1) < 1e-6
    forward[degenerate] = np.eye(3)[FORWARD_AXIS]
    forward = _norm(forward)

    up = np.broadcast_to(np.eye(3)[UP_AXIS], forward.shape)
    right = _norm(np.cross(up, forward))
    rotation = np.stack([right, up, forward], axis=-1)
    return compose(position, rotation)


def axis_angle_rotation(axis, angle: float) -> np.ndarray:
    """3x3 rotation matrix for a right-handed rotation of *angle* radians."""
    x, y, z = _norm(np.asarray(axis, dtype=np.float64))
    c, s = np.cos(angle), np.sin(angle)
    t = 1.0 - c
    return np.array([
        [t * x * x + c,     t * x * y - s * z, t * x * z + s * y],
        [t * x * y + s * z, t * y * y + c,     t * y * z - s * x],
        [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
    ])


def finite_difference(positions: np.ndarray, framerate: float) -> np.ndarray:
    """Per-frame velocity along axis 0: backward difference, forward on frame 0."""
    positions = np.asarray(positions, dtype=np.float64)
    velocity = np.zeros_like(positions)
    if len(positions) > 1:
        velocity[1:] = (positions[1:] - positions[:-1]) * framerate
        velocity[0] = velocity[1]
    return velocity
