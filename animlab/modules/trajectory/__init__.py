"""
#WHERE
    Imported by pipeline.py and tests.

#WHAT
    Trajectory Module — fixed 12-point past/current/future root windows
    with style, phase and style-signal channels for controller training.
"""

from .models import Trajectory, TrajectoryPoint
from .sampler import sample_trajectory

__all__ = ["Trajectory", "TrajectoryPoint", "sample_trajectory"]
