"""
#WHERE
    Imported by trajectory/sampler.py, motion_data/archive.py, pipeline.py
    and tests.

#WHAT
    Style and phase providers consumed by the trajectory sampler, with
    array-backed tracks loaded from clip archives.
"""

from .phase import PhaseProvider, PhaseTrack, phase_delta, wrap_phase
from .style import StyleProvider, StyleTrack, derive_signals

__all__ = [
    "PhaseProvider",
    "PhaseTrack",
    "phase_delta",
    "wrap_phase",
    "StyleProvider",
    "StyleTrack",
    "derive_signals",
]
