"""
#WHERE
    Produced by sampler.py; consumed by pipeline.py exports and tests.

#WHAT
    Trajectory window data model — 12 root samples (6 past, current,
    5 future) with style weights, phase and style signals per sample.

#INPUT
    Style catalog names.

#OUTPUT
    Trajectory / TrajectoryPoint instances and flat feature arrays.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from animlab.modules.motion_data.transforms import compose, get_position, get_rotation
from animlab.shared.constants import CURRENT_INDEX, FORWARD_AXIS, TRAJECTORY_POINTS


@dataclass(slots=True)
class TrajectoryPoint:
    index: int
    transformation: np.ndarray = field(default_factory=lambda: np.eye(4))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    styles: np.ndarray = field(default_factory=lambda: np.zeros(0))
    phase: float = 0.0
    signals: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def position(self) -> np.ndarray:
        return get_position(self.transformation)

    @property
    def rotation(self) -> np.ndarray:
        return get_rotation(self.transformation)

    @property
    def direction(self) -> np.ndarray:
        return self.rotation[:, FORWARD_AXIS]

    def set_transformation(self, matrix: np.ndarray) -> None:
        self.transformation = np.array(matrix, dtype=np.float64, copy=True)

    def set_position(self, position: np.ndarray) -> None:
        self.transformation = compose(position, self.rotation)

    def set_rotation(self, rotation: np.ndarray) -> None:
        self.transformation = compose(self.position, rotation)

    def set_velocity(self, velocity: np.ndarray) -> None:
        self.velocity = np.array(velocity, dtype=np.float64, copy=True)


@dataclass
class Trajectory:
    style_names: List[str]
    points: List[TrajectoryPoint]

    @classmethod
    def empty(cls, style_names: Sequence[str] = ()) -> "Trajectory":
        return cls(list(style_names), [TrajectoryPoint(i) for i in range(TRAJECTORY_POINTS)])

    def __len__(self) -> int:
        return len(self.points)

    @property
    def current(self) -> TrajectoryPoint:
        return self.points[CURRENT_INDEX]

    @property
    def past(self) -> List[TrajectoryPoint]:
        return self.points[:CURRENT_INDEX]

    @property
    def future(self) -> List[TrajectoryPoint]:
        return self.points[CURRENT_INDEX + 1:]

    @property
    def last(self) -> TrajectoryPoint:
        return self.points[-1]

    def positions(self) -> np.ndarray:
        return np.stack([p.position for p in self.points])

    def rotations(self) -> np.ndarray:
        return np.stack([p.rotation for p in self.points])

    def directions(self) -> np.ndarray:
        return np.stack([p.direction for p in self.points])

    def velocities(self) -> np.ndarray:
        return np.stack([p.velocity for p in self.points])

    def phases(self) -> np.ndarray:
        return np.array([p.phase for p in self.points])

    def styles(self) -> np.ndarray:
        return np.stack([p.styles for p in self.points])

    def signals(self) -> np.ndarray:
        return np.stack([p.signals for p in self.points])

    def feature_size(self) -> int:
        return 10 + 2 * len(self.style_names)

    def to_features(self) -> np.ndarray:
        """(12, F) float32: position, direction, velocity, phase, styles, signals."""
        return np.concatenate([
            self.positions(),
            self.directions(),
            self.velocities(),
            self.phases()[:, None],
            self.styles(),
            self.signals(),
        ], axis=1).astype(np.float32)
