"""Memory profiling helpers for long annotation runs.

``tracemalloc_snapshot(label)`` logs the heap delta of a block; it is always
available.  ``@profile_memory`` switches on line-level profiling through
``memory_profiler`` when ``PROFILE_MEMORY=1`` is set, and is a no-op
otherwise.

Usage::

    with tracemalloc_snapshot("contacts"):
        module.compute()

    PROFILE_MEMORY=1 animlab clip.npz --config sensors.json
"""
from __future__ import annotations

import contextlib
import logging
import os
import tracemalloc
from typing import Generator

log = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_PROFILE_ACTIVE = os.environ.get("PROFILE_MEMORY", "0").strip().lower() in _TRUTHY


@contextlib.contextmanager
def tracemalloc_snapshot(label: str, top_n: int = 5) -> Generator[None, None, None]:
    """Log the net allocation change of the wrapped block.

    The top *top_n* growing allocation sites go to DEBUG.  Nested use is
    safe; only the outermost snapshot stops tracing.
    """
    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start(10)

    before = tracemalloc.take_snapshot()
    mem_before = sum(s.size for s in before.statistics("filename"))

    try:
        yield
    finally:
        after = tracemalloc.take_snapshot()
        mem_after = sum(s.size for s in after.statistics("filename"))
        diff = mem_after - mem_before
        log.info(
            "[mem] %s: %+d KB  (%.2f MB → %.2f MB)",
            label,
            diff // 1024,
            mem_before / 1024 / 1024,
            mem_after / 1024 / 1024,
        )
        for stat in after.compare_to(before, "lineno")[:top_n]:
            if stat.size_diff:
                site = str(stat.traceback[0]) if stat.traceback else "<unknown>"
                log.debug("[mem]  %+8.1f KB  |  %s", stat.size_diff / 1024, site)

        if not already_tracing:
            tracemalloc.stop()


def profile_memory(fn):
    """Wrap *fn* with ``memory_profiler.profile`` when ``PROFILE_MEMORY=1``.

    Without the env-var the function is returned untouched.  If the
    variable is set but ``memory-profiler`` is not installed, a warning is
    logged once and *fn* runs unwrapped.
    """
    if not _PROFILE_ACTIVE:
        return fn

    try:
        from memory_profiler import profile as _mp_profile  # type: ignore[import-untyped]
    except ImportError:
        log.warning(
            "[mem] PROFILE_MEMORY=1 but 'memory-profiler' is not installed. "
            "Run:  pip install memory-profiler"
        )
        return fn

    log.debug("[mem] memory_profiler active → %s.%s", fn.__module__, fn.__qualname__)
    return _mp_profile(fn)
