"""
#WHERE
    Consumed by contact.py, trajectory/sampler.py, style_phase tracks,
    archive.py, pipeline.py and tests.

#WHAT
    Core data model for a recorded clip — a time-ordered stack of joint
    world transforms (T, J, 4, 4) with framerate, joint names and the
    left/right symmetry table used for mirroring.  ``Frame`` is a light
    index view that exposes per-frame accessors.

#INPUT
    transforms array, framerate, joint names, symmetry table, hips joint.

#OUTPUT
    MotionClip / Frame instances.  Arrays handed out are read-only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from animlab.shared.constants import DEFAULT_FRAMERATE, DEFAULT_MIRROR_AXIS
from animlab.shared.errors import ClipError

from .transforms import (
    finite_difference,
    get_position,
    get_rotation,
    ground_projection,
    mirror_transforms,
)

log = logging.getLogger(__name__)


def _readonly(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


@dataclass(eq=False)
class MotionClip:
    transforms: np.ndarray                  # (T, J, 4, 4) joint world transforms
    framerate: float = DEFAULT_FRAMERATE
    names: List[str] = field(default_factory=list)
    symmetry: Optional[Sequence[int]] = None
    hips: int = 0
    mirror_axis: int = DEFAULT_MIRROR_AXIS
    name: str = "clip"
    _cache: Dict[Tuple, np.ndarray] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        transforms = np.array(self.transforms, dtype=np.float64)
        if transforms.ndim != 4 or transforms.shape[2:] != (4, 4):
            raise ClipError(f"transforms must have shape (T, J, 4, 4), got {transforms.shape}")
        if transforms.shape[0] < 1 or transforms.shape[1] < 1:
            raise ClipError("clip needs at least one frame and one joint")
        if not self.framerate > 0:
            raise ClipError(f"framerate must be positive, got {self.framerate}")
        self.transforms = _readonly(transforms)

        joints = transforms.shape[1]
        if not self.names:
            self.names = [f"joint_{i}" for i in range(joints)]
        if len(self.names) != joints:
            raise ClipError(f"{len(self.names)} names for {joints} joints")
        self.names = list(self.names)

        symmetry = np.arange(joints) if self.symmetry is None else np.asarray(self.symmetry, dtype=np.int64)
        if symmetry.shape != (joints,) or sorted(symmetry.tolist()) != list(range(joints)):
            raise ClipError("symmetry must be a permutation of joint ids")
        self.symmetry = _readonly(symmetry)

        if not 0 <= self.hips < joints:
            raise ClipError(f"hips joint {self.hips} out of range")
        if self.mirror_axis not in (0, 1, 2):
            raise ClipError(f"mirror axis must be 0, 1 or 2, got {self.mirror_axis}")

    # ── Frame lookup ──────────────────────────────────────────────────────

    def total_frames(self) -> int:
        return self.transforms.shape[0]

    def total_joints(self) -> int:
        return self.transforms.shape[1]

    def total_time(self) -> float:
        return (self.total_frames() - 1) / self.framerate

    def clamp_time(self, time: float) -> float:
        return min(max(time, 0.0), self.total_time())

    def frame(self, index: int) -> "Frame":
        if not 0 <= index < self.total_frames():
            raise ClipError(f"frame {index} out of range [0, {self.total_frames()})")
        return Frame(self, index)

    def frame_at(self, time: float) -> "Frame":
        """Nearest frame to *time*; times outside the clip are clamped."""
        index = int(np.rint(self.clamp_time(time) * self.framerate))
        return Frame(self, min(index, self.total_frames() - 1))

    def first_frame(self) -> "Frame":
        return Frame(self, 0)

    def last_frame(self) -> "Frame":
        return Frame(self, self.total_frames() - 1)

    def frames(self) -> List["Frame"]:
        return [Frame(self, i) for i in range(self.total_frames())]

    def owns(self, frame: "Frame") -> bool:
        return frame.clip is self and 0 <= frame.index < self.total_frames()

    def joint_index(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise ClipError(f"unknown joint '{name}'") from None

    # ── Whole-clip arrays ─────────────────────────────────────────────────

    def joint_transformations(self, joint: int, mirrored: bool = False) -> np.ndarray:
        """(T, 4, 4) world transforms of *joint*, optionally mirrored."""
        if not 0 <= joint < self.total_joints():
            raise ClipError(f"joint {joint} out of range [0, {self.total_joints()})")
        if not mirrored:
            return self.transforms[:, joint]
        return self._cached(("joint", joint), lambda: mirror_transforms(
            self.transforms[:, self.symmetry[joint]], self.mirror_axis,
        ))

    def joint_velocities(self, joint: int, mirrored: bool = False) -> np.ndarray:
        return self._cached(("joint_velocity", joint, mirrored), lambda: finite_difference(
            get_position(self.joint_transformations(joint, mirrored)), self.framerate,
        ))

    def root_transformations(self, mirrored: bool = False) -> np.ndarray:
        return self._cached(("root", mirrored), lambda: ground_projection(
            self.joint_transformations(self.hips, mirrored),
        ))

    def root_velocities(self, mirrored: bool = False) -> np.ndarray:
        return self._cached(("root_velocity", mirrored), lambda: finite_difference(
            get_position(self.root_transformations(mirrored)), self.framerate,
        ))

    def _cached(self, key: Tuple, build) -> np.ndarray:
        value = self._cache.get(key)
        if value is None:
            value = _readonly(np.ascontiguousarray(build()))
            self._cache[key] = value
        return value


@dataclass(frozen=True)
class Frame:
    clip: MotionClip
    index: int

    @property
    def timestamp(self) -> float:
        return self.index / self.clip.framerate

    def joint_transformation(self, joint: int, mirrored: bool = False) -> np.ndarray:
        return self.clip.joint_transformations(joint, mirrored)[self.index]

    def joint_position(self, joint: int, mirrored: bool = False) -> np.ndarray:
        return get_position(self.joint_transformation(joint, mirrored))

    def joint_velocity(self, joint: int, mirrored: bool = False) -> np.ndarray:
        return self.clip.joint_velocities(joint, mirrored)[self.index]

    def root_transformation(self, mirrored: bool = False) -> np.ndarray:
        return self.clip.root_transformations(mirrored)[self.index]

    def root_position(self, mirrored: bool = False) -> np.ndarray:
        return get_position(self.root_transformation(mirrored))

    def root_rotation(self, mirrored: bool = False) -> np.ndarray:
        return get_rotation(self.root_transformation(mirrored))

    def root_velocity(self, mirrored: bool = False) -> np.ndarray:
        return self.clip.root_velocities(mirrored)[self.index]
