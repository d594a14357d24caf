"""
#WHERE
    Imported by every animlab module and by tests.

#WHAT
    Shared constants, the error hierarchy and memory-profiling helpers.
"""

from .errors import AnimlabError, ClipError, ContactConfigError, TrajectoryError
from .mem_profile import profile_memory, tracemalloc_snapshot

__all__ = [
    "AnimlabError",
    "ClipError",
    "ContactConfigError",
    "TrajectoryError",
    "profile_memory",
    "tracemalloc_snapshot",
]
