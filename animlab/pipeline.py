"""
#WHERE
    Entry point of the whole system — called by cli.py and tests.

#WHAT
    Batch annotation: clip archive → ground collision world → contact
    labels per sensor → trajectory window per frame (regular + mirrored)
    → ``.npz`` feature file.

#INPUT
    Clip archive path, AnnotationConfig.

#OUTPUT
    Dict with output path, frame count, sensor names and per-stage timings.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from animlab.modules.contact import ContactModule
from animlab.modules.motion_data import ClipArchive, load_archive
from animlab.modules.physics_world import PhysicsWorld, layer_mask
from animlab.modules.trajectory import sample_trajectory
from animlab.shared.constants import (
    DEFAULT_CONTACT_NORMAL,
    DEFAULT_CONTACT_OFFSET,
    DEFAULT_CONTACT_THRESHOLD,
    DEFAULT_OUTPUT_DIR,
    GROUND_LAYER,
    TRAJECTORY_POINTS,
)
from animlab.shared.errors import AnimlabError
from animlab.shared.mem_profile import profile_memory, tracemalloc_snapshot

log = logging.getLogger(__name__)


@dataclass
class SensorConfig:
    joint: str
    threshold: float = DEFAULT_CONTACT_THRESHOLD
    offset: List[float] = field(default_factory=lambda: list(DEFAULT_CONTACT_OFFSET))
    normal: List[float] = field(default_factory=lambda: list(DEFAULT_CONTACT_NORMAL))
    layers: List[int] = field(default_factory=lambda: [GROUND_LAYER])


@dataclass
class AnnotationConfig:
    output_dir: str = DEFAULT_OUTPUT_DIR
    ground_height: float = 0.0
    ground_layer: int = GROUND_LAYER
    sensors: List[SensorConfig] = field(default_factory=list)
    sample_trajectories: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationConfig":
        data = dict(data)
        unknown = set(data) - {f for f in cls.__dataclass_fields__}
        if unknown:
            raise AnimlabError(f"unknown config keys: {sorted(unknown)}")
        data["sensors"] = [SensorConfig(**s) for s in data.get("sensors", [])]
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> "AnnotationConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AnnotationPipeline:
    """Clip archive → contacts + trajectory features.  One collision world per run."""

    def __init__(self, config: AnnotationConfig | None = None) -> None:
        self.config = config or AnnotationConfig()

    def run(self, clip_path: str | Path, output_name: Optional[str] = None) -> Dict[str, Any]:
        timings: Dict[str, float] = {}

        t0 = time.perf_counter()
        archive = load_archive(clip_path)
        timings["load"] = time.perf_counter() - t0
        clip = archive.clip

        with PhysicsWorld() as world:
            world.add_ground(self.config.ground_height, layer=self.config.ground_layer)

            t0 = time.perf_counter()
            with tracemalloc_snapshot("contacts"):
                contacts = self._build_contacts(archive, world)
            timings["contacts"] = time.perf_counter() - t0

            regular = contacts.contact_matrix(mirrored=False)
            inverse = contacts.contact_matrix(mirrored=True)

        arrays = {
            "sensors": np.array([clip.names[s] for s in contacts.sensors()], dtype=str),
            "contacts_regular": regular,
            "contacts_inverse": inverse,
        }

        if self.config.sample_trajectories:
            t0 = time.perf_counter()
            with tracemalloc_snapshot("trajectories"):
                arrays["trajectory_regular"], arrays["trajectory_inverse"] = self._sample_all(archive)
            timings["trajectories"] = time.perf_counter() - t0
            if archive.styles is not None:
                arrays["style_names"] = np.array(archive.styles.names(), dtype=str)

        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"{output_name or clip.name}_annotations.npz"
        np.savez_compressed(output_path, **arrays)
        log.info("Wrote %s (%d frames, %d sensors)", output_path, clip.total_frames(), len(contacts))

        return {
            "clip": clip.name,
            "output_path": str(output_path),
            "frames": clip.total_frames(),
            "sensors": [clip.names[s] for s in contacts.sensors()],
            "timings": timings,
        }

    def _build_contacts(self, archive: ClipArchive, world: PhysicsWorld) -> ContactModule:
        clip = archive.clip
        module = ContactModule(clip, world)
        for sensor in self.config.sensors:
            module.add_contact(
                clip.joint_index(sensor.joint),
                threshold=sensor.threshold,
                offset=sensor.offset,
                normal=sensor.normal,
                mask=layer_mask(*sensor.layers),
            )
        log.info("%d contact sensors on '%s'", len(module), clip.name)
        return module

    @profile_memory
    def _sample_all(self, archive: ClipArchive) -> Tuple[np.ndarray, np.ndarray]:
        clip = archive.clip
        feature_size = None
        out = []
        for mirrored in (False, True):
            rows = []
            for frame in clip.frames():
                trajectory = sample_trajectory(clip, frame, mirrored, archive.styles, archive.phases)
                rows.append(trajectory.to_features())
                feature_size = feature_size or trajectory.feature_size()
            out.append(np.stack(rows))
        log.info("Sampled %d trajectories × %d points × %d features per mirror state",
                 clip.total_frames(), TRAJECTORY_POINTS, feature_size)
        return out[0], out[1]
