"""
#WHERE
    Called by pipeline.py for every frame and mirror state, and by tests.

#WHAT
    Trajectory sampling — fills the 12-point window around a reference
    frame.  Past samples span one second back, future samples one second
    ahead.  Where the window leaves the clip, samples are reflected about
    the first/last frame: rotation, velocity and style come from the
    reflected frame, position is extrapolated away from the boundary and
    phase is unwound around the boundary phase.

#INPUT
    MotionClip, reference Frame, mirror flag, optional style/phase providers.

#OUTPUT
    Trajectory (fresh instance per call; the clip is never modified).
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from animlab.modules.motion_data import Frame, MotionClip
from animlab.modules.style_phase import PhaseProvider, StyleProvider, phase_delta, wrap_phase
from animlab.shared.constants import (
    CURRENT_INDEX,
    FUTURE_POINTS,
    FUTURE_WINDOW,
    PAST_POINTS,
    PAST_WINDOW,
    PROVIDER_WINDOW,
)
from animlab.shared.errors import TrajectoryError

from .models import Trajectory, TrajectoryPoint


def _past_ratio(pivot: float, clamped: float) -> float:
    if pivot == clamped or clamped == 0.0:
        return 1.0
    return abs(pivot / clamped)


def _future_ratio(pivot: float, clamped: float, total: float) -> float:
    if pivot == clamped or clamped == total:
        return 1.0
    return abs((total - pivot) / (total - clamped))


class _Lookup:
    """Provider access with the missing-provider fallbacks (no style, phase 0)."""

    def __init__(self, mirrored: bool, styles: Optional[StyleProvider], phases: Optional[PhaseProvider]):
        self.mirrored = mirrored
        self.styles = styles
        self.phases = phases

    def style(self, frame: Frame) -> np.ndarray:
        if self.styles is None:
            return np.zeros(0)
        return np.array(self.styles.style(frame, PROVIDER_WINDOW), dtype=np.float64)

    def signal(self, frame: Frame, inverse: bool) -> np.ndarray:
        if self.styles is None:
            return np.zeros(0)
        source = self.styles.inverse_signal if inverse else self.styles.signal
        return np.asarray(source(frame, PROVIDER_WINDOW), dtype=np.float64) - self.style(frame)

    def phase(self, frame: Frame) -> float:
        if self.phases is None:
            return 0.0
        return float(self.phases.phase(frame, self.mirrored, PROVIDER_WINDOW))

    def copy_into(self, point: TrajectoryPoint, frame: Frame) -> None:
        point.set_transformation(frame.root_transformation(self.mirrored))
        point.set_velocity(frame.root_velocity(self.mirrored))
        point.styles = self.style(frame)
        point.phase = self.phase(frame)


def sample_trajectory(
    clip: MotionClip,
    frame: Frame,
    mirrored: bool = False,
    styles: Optional[StyleProvider] = None,
    phases: Optional[PhaseProvider] = None,
) -> Trajectory:
    if not clip.owns(frame):
        raise TrajectoryError(f"frame {frame.index} does not belong to clip '{clip.name}'")

    lookup = _Lookup(mirrored, styles, phases)
    trajectory = Trajectory.empty(styles.names() if styles is not None else ())
    points = trajectory.points
    total = clip.total_time()
    first, last = clip.first_frame(), clip.last_frame()
    t = frame.timestamp

    lookup.copy_into(points[CURRENT_INDEX], frame)

    for i in range(PAST_POINTS):
        delta = -PAST_WINDOW + PAST_WINDOW * i / PAST_POINTS
        point = points[i]
        if t + delta < 0.0:
            pivot = -t - delta
            clamped = clip.clamp_time(pivot)
            ratio = _past_ratio(pivot, clamped)
            reference = clip.frame_at(clamped)
            lookup.copy_into(point, reference)
            origin = first.root_position(mirrored)
            point.set_position(origin - ratio * (reference.root_position(mirrored) - origin))
            if phases is not None:
                boundary = lookup.phase(first)
                point.phase = wrap_phase(boundary - phase_delta(boundary, lookup.phase(reference)))
        else:
            lookup.copy_into(point, clip.frame_at(clip.clamp_time(t + delta)))

    for i in range(1, FUTURE_POINTS + 1):
        delta = FUTURE_WINDOW * i / FUTURE_POINTS
        point = points[CURRENT_INDEX + i]
        if t + delta > total:
            pivot = 2.0 * total - t - delta
            clamped = clip.clamp_time(pivot)
            ratio = _future_ratio(pivot, clamped, total)
            reference = clip.frame_at(clamped)
            lookup.copy_into(point, reference)
            origin = last.root_position(mirrored)
            point.set_position(origin - ratio * (reference.root_position(mirrored) - origin))
            if phases is not None:
                boundary = lookup.phase(last)
                point.phase = wrap_phase(boundary + phase_delta(lookup.phase(reference), boundary))
        else:
            lookup.copy_into(point, clip.frame_at(clip.clamp_time(t + delta)))

    _sample_signals(clip, trajectory, t, lookup)
    _finish_styles(trajectory)
    return trajectory


def _sample_signals(clip: MotionClip, trajectory: Trajectory, t: float, lookup: _Lookup) -> None:
    """Past and current points sample signals; future points hold the current one."""
    points = trajectory.points
    for i in range(CURRENT_INDEX + 1):
        delta = -PAST_WINDOW + PAST_WINDOW * i / PAST_POINTS
        if t + delta < 0.0:
            reference = clip.frame_at(clip.clamp_time(-t - delta))
            points[i].signals = lookup.signal(reference, inverse=True)
        else:
            reference = clip.frame_at(clip.clamp_time(t + delta))
            points[i].signals = lookup.signal(reference, inverse=False)
    for point in trajectory.future:
        point.signals = points[CURRENT_INDEX].signals.copy()


def _finish_styles(trajectory: Trajectory) -> None:
    """Keep in-progress style transitions monotone across the future window.

    A signal strictly inside (0, 1) lets a style only grow from one future
    point to the next, strictly inside (-1, 0) only shrink; a signal of 0
    or ±1 pins the future style to the current one.
    """
    points = trajectory.points
    signals = trajectory.last.signals
    current = points[CURRENT_INDEX].styles
    for d, signal in enumerate(signals):
        for j in range(CURRENT_INDEX + 1, len(points)):
            previous = points[j - 1].styles[d]
            if 0.0 < signal < 1.0:
                points[j].styles[d] = max(previous, points[j].styles[d])
            elif -1.0 < signal < 0.0:
                points[j].styles[d] = min(previous, points[j].styles[d])
            elif signal == 0.0 or abs(signal) == 1.0:
                points[j].styles[d] = current[d]
    if signals.size and not np.any(signals):
        for point in trajectory.future:
            point.styles = current.copy()
