"""
#WHERE
    Used by pipeline.py and tests; sensors come from AnnotationConfig.

#WHAT
    Contact labelling — for a sensor joint, casts a short ray from the
    joint's offset pivot along its rotated normal in every frame (regular
    and mirrored) and records whether the collision world was hit within
    twice the threshold.

#INPUT
    MotionClip, CollisionWorld, sensor joint id, threshold, offset, normal,
    layer mask.

#OUTPUT
    (T,) bool arrays of contacts per mirror state; ContactModule bundles
    one ContactFunction per sensor.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from animlab.modules.motion_data import Frame, MotionClip
from animlab.modules.motion_data.transforms import get_position, get_rotation
from animlab.modules.physics_world import CollisionWorld
from animlab.shared.constants import (
    ALL_LAYERS,
    DEFAULT_CONTACT_NORMAL,
    DEFAULT_CONTACT_OFFSET,
    DEFAULT_CONTACT_THRESHOLD,
)
from animlab.shared.errors import ContactConfigError

log = logging.getLogger(__name__)


def _vector(value: Sequence[float], label: str) -> np.ndarray:
    v = np.array(value, dtype=np.float64)
    if v.shape != (3,) or not np.all(np.isfinite(v)):
        raise ContactConfigError(f"{label} must be a finite 3-vector, got {value!r}")
    return v


def _validate(clip: MotionClip, sensor: int, threshold: float, normal: np.ndarray) -> None:
    if not 0 <= sensor < clip.total_joints():
        raise ContactConfigError(f"sensor {sensor} out of range [0, {clip.total_joints()})")
    if not threshold > 0:
        raise ContactConfigError(f"threshold must be positive, got {threshold}")
    if not np.linalg.norm(normal) > 0:
        raise ContactConfigError("normal must be non-zero")


def pivot_transformations(clip: MotionClip, sensor: int, offset: np.ndarray,
                          mirrored: bool = False) -> np.ndarray:
    """(T, 4, 4) sensor transforms translated by ``rotation @ offset``."""
    pivots = np.array(clip.joint_transformations(sensor, mirrored), copy=True)
    pivots[:, :3, 3] += get_rotation(pivots) @ offset
    return pivots


def compute_contacts(
    clip: MotionClip,
    sensor: int,
    offset: Sequence[float],
    normal: Sequence[float],
    threshold: float,
    mask: int,
    world: CollisionWorld,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return (regular, inverse) contact flags, one per frame.

    The ray of each frame starts ``threshold`` behind the pivot along the
    rotated normal and is ``2 * threshold`` long.  Raises
    ContactConfigError before casting anything if the sensor, threshold or
    normal is invalid.
    """
    offset = _vector(offset, "offset")
    normal = _vector(normal, "normal")
    _validate(clip, sensor, threshold, normal)

    contacts = np.zeros((2, clip.total_frames()), dtype=bool)
    for mirrored in (False, True):
        pivots = pivot_transformations(clip, sensor, offset, mirrored)
        directions = get_rotation(pivots) @ normal
        origins = get_position(pivots) - threshold * directions
        contacts[int(mirrored)] = world.raycast_batch(origins, directions, 2.0 * threshold, mask)
    return contacts[0], contacts[1]


class ContactFunction:
    """Contact configuration of one sensor plus its per-frame flags.

    Every setter that changes a value recomputes both flag arrays in full;
    setting an unchanged value is a no-op.  Recomputation fills new arrays
    and swaps them in, so readers see either the old or the new result.
    """

    def __init__(
        self,
        clip: MotionClip,
        world: CollisionWorld,
        sensor: int = 0,
        threshold: float = DEFAULT_CONTACT_THRESHOLD,
        offset: Sequence[float] = DEFAULT_CONTACT_OFFSET,
        normal: Sequence[float] = DEFAULT_CONTACT_NORMAL,
        mask: int = ALL_LAYERS,
    ):
        self.clip = clip
        self.world = world
        self._sensor = int(sensor)
        self._threshold = float(threshold)
        self._offset = _vector(offset, "offset")
        self._normal = _vector(normal, "normal")
        self._mask = int(mask)
        self._contacts: Tuple[np.ndarray, np.ndarray] = (
            np.zeros(clip.total_frames(), dtype=bool),
            np.zeros(clip.total_frames(), dtype=bool),
        )
        self.compute()

    @property
    def sensor(self) -> int:
        return self._sensor

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def offset(self) -> np.ndarray:
        return self._offset.copy()

    @property
    def normal(self) -> np.ndarray:
        return self._normal.copy()

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def regular(self) -> np.ndarray:
        return self._contacts[0]

    @property
    def inverse(self) -> np.ndarray:
        return self._contacts[1]

    def contacts(self, mirrored: bool = False) -> np.ndarray:
        return self._contacts[int(mirrored)]

    def set_sensor(self, sensor: int) -> None:
        if sensor != self._sensor:
            _validate(self.clip, sensor, self._threshold, self._normal)
            self._sensor = int(sensor)
            self.compute()

    def set_threshold(self, threshold: float) -> None:
        if threshold != self._threshold:
            _validate(self.clip, self._sensor, threshold, self._normal)
            self._threshold = float(threshold)
            self.compute()

    def set_offset(self, offset: Sequence[float]) -> None:
        offset = _vector(offset, "offset")
        if not np.array_equal(offset, self._offset):
            self._offset = offset
            self.compute()

    def set_normal(self, normal: Sequence[float]) -> None:
        normal = _vector(normal, "normal")
        if not np.array_equal(normal, self._normal):
            _validate(self.clip, self._sensor, self._threshold, normal)
            self._normal = normal
            self.compute()

    def set_mask(self, mask: int) -> None:
        if mask != self._mask:
            self._mask = int(mask)
            self.compute()

    def compute(self) -> None:
        regular, inverse = compute_contacts(
            self.clip, self._sensor, self._offset, self._normal,
            self._threshold, self._mask, self.world,
        )
        regular.setflags(write=False)
        inverse.setflags(write=False)
        self._contacts = (regular, inverse)
        log.debug("Contacts '%s': %d regular, %d mirrored of %d frames",
                  self.clip.names[self._sensor], regular.sum(), inverse.sum(), len(regular))

    def has_contact(self, frame: Frame, mirrored: bool = False) -> bool:
        return bool(self._contacts[int(mirrored)][frame.index])

    def pivot_transformation(self, frame: Frame, mirrored: bool = False) -> np.ndarray:
        matrix = np.array(frame.joint_transformation(self._sensor, mirrored), copy=True)
        matrix[:3, 3] += get_rotation(matrix) @ self._offset
        return matrix


class ContactModule:
    """Contact functions of one clip, keyed by sensor joint id."""

    def __init__(self, clip: MotionClip, world: CollisionWorld):
        self.clip = clip
        self.world = world
        self._functions: Dict[int, ContactFunction] = {}

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[ContactFunction]:
        return iter(self._functions.values())

    def __contains__(self, sensor: int) -> bool:
        return sensor in self._functions

    def sensors(self) -> List[int]:
        return list(self._functions)

    def get(self, sensor: int) -> Optional[ContactFunction]:
        return self._functions.get(sensor)

    def add_contact(self, sensor: int, **params) -> ContactFunction:
        existing = self._functions.get(sensor)
        if existing is not None:
            log.warning("Contact for joint %d already exists", sensor)
            return existing
        function = ContactFunction(self.clip, self.world, sensor=sensor, **params)
        self._functions[sensor] = function
        log.info("Added contact sensor '%s'", self.clip.names[sensor])
        return function

    def remove_contact(self, sensor: int) -> bool:
        if self._functions.pop(sensor, None) is None:
            log.warning("Contact for joint %d does not exist", sensor)
            return False
        return True

    def compute(self) -> None:
        for function in self._functions.values():
            function.compute()
        log.info("Computed %d contact functions over %d frames",
                 len(self._functions), self.clip.total_frames())

    def contact_matrix(self, mirrored: bool = False) -> np.ndarray:
        """(T, n_sensors) flags, columns in insertion order."""
        if not self._functions:
            return np.zeros((self.clip.total_frames(), 0), dtype=bool)
        return np.stack([f.contacts(mirrored) for f in self._functions.values()], axis=1)
