"""
#WHERE
    Imported by contact, trajectory, style_phase, pipeline.py and tests.

#WHAT
    Motion Data Module — clip/frame store over (T, J, 4, 4) joint world
    transforms with on-the-fly mirroring, ground-projected root motion and
    ``.npz`` archives.
"""

from .clip import Frame, MotionClip
from .archive import ClipArchive, load_archive, save_archive
from . import transforms

__all__ = [
    "Frame",
    "MotionClip",
    "ClipArchive",
    "load_archive",
    "save_archive",
    "transforms",
]
