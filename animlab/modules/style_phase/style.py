"""Per-frame locomotion style weights and the transition signals derived from them."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

import numpy as np

from animlab.modules.motion_data import Frame
from animlab.shared.errors import ClipError

log = logging.getLogger(__name__)

STATIONARY_TOLERANCE: float = 1e-6


class StyleProvider(Protocol):
    def names(self) -> List[str]: ...

    def style(self, frame: Frame, window: int = 0) -> np.ndarray: ...

    def signal(self, frame: Frame, window: int = 0) -> np.ndarray: ...

    def inverse_signal(self, frame: Frame, window: int = 0) -> np.ndarray: ...


def derive_signals(values: np.ndarray, tolerance: float = STATIONARY_TOLERANCE):
    """Transition targets for each frame and style.

    The forward signal of a frame is the style value where its current
    transition ends (the next frame that does not change); the inverse
    signal is the value where the transition started.  Frames outside any
    transition get their own value in both.
    """
    values = np.asarray(values, dtype=np.float64)
    forward = values.copy()
    inverse = values.copy()
    moving = np.abs(np.diff(values, axis=0)) > tolerance     # (T-1, S)

    for f in range(len(values) - 2, -1, -1):
        forward[f] = np.where(moving[f], forward[f + 1], values[f])
    for f in range(1, len(values)):
        inverse[f] = np.where(moving[f - 1], inverse[f - 1], values[f])
    return forward, inverse


class StyleTrack:
    """Array-backed style provider over ``(T, S)`` weights in [0, 1]."""

    def __init__(
        self,
        names: Sequence[str],
        values: np.ndarray,
        signals: Optional[np.ndarray] = None,
        inverse_signals: Optional[np.ndarray] = None,
    ):
        values = np.array(values, dtype=np.float64)
        if values.ndim != 2 or values.shape[1] != len(names):
            raise ClipError(f"style values must be (T, {len(names)}), got {values.shape}")
        if values.size and (values.min() < 0.0 or values.max() > 1.0):
            raise ClipError("style weights must lie in [0, 1]")
        self._names = list(names)
        self.values = values

        forward, backward = derive_signals(values)
        self.signals = forward if signals is None else self._checked(signals, "signals")
        self.inverse_signals = backward if inverse_signals is None else self._checked(inverse_signals, "inverse signals")

    def __len__(self) -> int:
        return len(self.values)

    def names(self) -> List[str]:
        return list(self._names)

    def style(self, frame: Frame, window: int = 0) -> np.ndarray:
        return self._sample(self.values, frame, window)

    def signal(self, frame: Frame, window: int = 0) -> np.ndarray:
        return self._sample(self.signals, frame, window)

    def inverse_signal(self, frame: Frame, window: int = 0) -> np.ndarray:
        return self._sample(self.inverse_signals, frame, window)

    @staticmethod
    def _sample(track: np.ndarray, frame: Frame, window: int) -> np.ndarray:
        if window <= 0:
            return track[frame.index].copy()
        lo = max(frame.index - window, 0)
        hi = min(frame.index + window + 1, len(track))
        return track[lo:hi].mean(axis=0)

    def _checked(self, array: np.ndarray, label: str) -> np.ndarray:
        array = np.array(array, dtype=np.float64)
        if array.shape != self.values.shape:
            raise ClipError(f"{label} shape {array.shape} != styles {self.values.shape}")
        return array
