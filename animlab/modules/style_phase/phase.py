"""Cyclic locomotion phase per frame and shortest-path phase arithmetic."""
from __future__ import annotations

from typing import Optional, Protocol

import numpy as np

from animlab.modules.motion_data import Frame
from animlab.shared.errors import ClipError


class PhaseProvider(Protocol):
    def phase(self, frame: Frame, mirrored: bool = False, window: int = 0) -> float: ...


def wrap_phase(value: float) -> float:
    """Map *value* into [0, 1)."""
    wrapped = float(np.mod(value, 1.0))
    return 0.0 if wrapped >= 1.0 else wrapped


def phase_delta(start: float, end: float) -> float:
    """Signed shortest step from *start* to *end* on the unit phase circle.

    The result lies in [-0.5, 0.5).
    """
    return wrap_phase(wrap_phase(end) - wrap_phase(start) + 0.5) - 0.5


class PhaseTrack:
    """Array-backed phase provider; the mirrored track defaults to the regular one."""

    def __init__(self, values: np.ndarray, mirrored_values: Optional[np.ndarray] = None):
        values = np.mod(np.asarray(values, dtype=np.float64), 1.0)
        if values.ndim != 1:
            raise ClipError(f"phase values must be 1-D, got shape {values.shape}")
        if mirrored_values is None:
            mirrored_values = values
        mirrored_values = np.mod(np.asarray(mirrored_values, dtype=np.float64), 1.0)
        if mirrored_values.shape != values.shape:
            raise ClipError("mirrored phase track must match the regular track")
        self.values = values
        self.mirrored_values = mirrored_values

    def __len__(self) -> int:
        return len(self.values)

    def phase(self, frame: Frame, mirrored: bool = False, window: int = 0) -> float:
        track = self.mirrored_values if mirrored else self.values
        if window <= 0:
            return wrap_phase(track[frame.index])
        lo = max(frame.index - window, 0)
        hi = min(frame.index + window + 1, len(track))
        # circular mean so the window may straddle the 1 → 0 wrap
        angles = 2.0 * np.pi * track[lo:hi]
        mean = np.arctan2(np.sin(angles).mean(), np.cos(angles).mean())
        return wrap_phase(mean / (2.0 * np.pi))
