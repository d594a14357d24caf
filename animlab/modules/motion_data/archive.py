"""
#WHERE
    Used by pipeline.py to read clips from disk, and by tests.

#WHAT
    ``.npz`` clip archives: joint transforms plus the optional style and
    phase annotations produced upstream.

#INPUT
    Path to an ``.npz`` with keys ``transforms``, ``framerate``, ``names``,
    ``symmetry``, ``hips``, ``mirror_axis`` and optionally ``styles`` with
    ``style_names`` (plus ``signals`` / ``inverse_signals`` when the
    transition targets were annotated), ``phases``, ``mirrored_phases``.

#OUTPUT
    ClipArchive(clip, styles, phases).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

import numpy as np

from animlab.shared.errors import ClipError

from .clip import MotionClip

if TYPE_CHECKING:
    from animlab.modules.style_phase import PhaseTrack, StyleTrack

log = logging.getLogger(__name__)

_REQUIRED = ("transforms", "framerate")


@dataclass
class ClipArchive:
    clip: MotionClip
    styles: Optional[StyleTrack] = None
    phases: Optional[PhaseTrack] = None


def load_archive(path: Union[str, Path]) -> ClipArchive:
    from animlab.modules.style_phase import PhaseTrack, StyleTrack

    path = Path(path)
    if not path.exists():
        raise ClipError(f"clip archive not found: {path}")

    with np.load(path, allow_pickle=False) as data:
        missing = [k for k in _REQUIRED if k not in data.files]
        if missing:
            raise ClipError(f"{path.name}: missing keys {missing}")

        clip = MotionClip(
            transforms=data["transforms"],
            framerate=float(data["framerate"]),
            names=[str(n) for n in data["names"]] if "names" in data.files else [],
            symmetry=data["symmetry"] if "symmetry" in data.files else None,
            hips=int(data["hips"]) if "hips" in data.files else 0,
            mirror_axis=int(data["mirror_axis"]) if "mirror_axis" in data.files else 0,
            name=path.stem,
        )

        styles = None
        if "styles" in data.files:
            if "style_names" not in data.files:
                raise ClipError(f"{path.name}: 'styles' without 'style_names'")
            styles = StyleTrack(
                names=[str(n) for n in data["style_names"]],
                values=data["styles"],
                signals=data["signals"] if "signals" in data.files else None,
                inverse_signals=data["inverse_signals"] if "inverse_signals" in data.files else None,
            )

        phases = None
        if "phases" in data.files:
            phases = PhaseTrack(
                values=data["phases"],
                mirrored_values=data["mirrored_phases"] if "mirrored_phases" in data.files else None,
            )

    for track in (styles, phases):
        if track is not None and len(track) != clip.total_frames():
            raise ClipError(f"{path.name}: annotation length {len(track)} != {clip.total_frames()} frames")

    log.info("Loaded '%s': %d frames, %d joints, %.1f fps",
             clip.name, clip.total_frames(), clip.total_joints(), clip.framerate)
    return ClipArchive(clip=clip, styles=styles, phases=phases)


def save_archive(archive: ClipArchive, path: Union[str, Path]) -> Path:
    path = Path(path).with_suffix(".npz")
    path.parent.mkdir(parents=True, exist_ok=True)
    clip = archive.clip
    arrays = {
        "transforms": clip.transforms,
        "framerate": np.float64(clip.framerate),
        "names": np.array(clip.names),
        "symmetry": np.asarray(clip.symmetry),
        "hips": np.int64(clip.hips),
        "mirror_axis": np.int64(clip.mirror_axis),
    }
    if archive.styles is not None:
        arrays["styles"] = archive.styles.values
        arrays["style_names"] = np.array(archive.styles.names())
        arrays["signals"] = archive.styles.signals
        arrays["inverse_signals"] = archive.styles.inverse_signals
    if archive.phases is not None:
        arrays["phases"] = archive.phases.values
        arrays["mirrored_phases"] = archive.phases.mirrored_values
    np.savez_compressed(path, **arrays)
    log.info("Saved '%s' → %s", clip.name, path)
    return path
