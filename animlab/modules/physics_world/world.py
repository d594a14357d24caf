"""Collision world for contact ray tests, backed by a PyBullet DIRECT client."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

import numpy as np

from animlab.shared.constants import ALL_LAYERS, GROUND_LAYER, MAX_LAYER, RAY_BATCH_SIZE

log = logging.getLogger(__name__)


def layer_mask(*layers: int) -> int:
    """Bit mask selecting the given collision layers."""
    mask = 0
    for layer in layers:
        if not 0 <= layer <= MAX_LAYER:
            raise ValueError(f"layer {layer} out of range [0, {MAX_LAYER}]")
        mask |= 1 << layer
    return mask


class CollisionWorld(Protocol):
    def raycast(self, origin: Sequence[float], direction: Sequence[float],
                max_distance: float, mask: int = ALL_LAYERS) -> bool: ...

    def raycast_batch(self, origins: np.ndarray, directions: np.ndarray,
                      max_distance: float, mask: int = ALL_LAYERS) -> np.ndarray: ...


@dataclass(slots=True)
class Collider:
    name: str
    body_id: int = -1
    layer: int = GROUND_LAYER
    position: List[float] = field(default_factory=lambda: [0, 0, 0])
    half_extents: List[float] = field(default_factory=lambda: [0.5, 0.5, 0.5])


class PhysicsWorld:
    """Static box colliders on numbered layers, queried with batched rays.

    Each collider's collision group is its layer bit and its own mask
    accepts every group, so only the ray's ``collisionFilterMask`` decides
    which layers it can hit.
    """

    def __init__(self):
        self.client: Optional[int] = None
        self.colliders: Dict[str, Collider] = {}
        self._is_setup = False

    def __enter__(self) -> "PhysicsWorld":
        if not self.setup():
            raise RuntimeError("PyBullet connection failed")
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    def setup(self) -> bool:
        import pybullet as p

        try:
            self.client = p.connect(p.DIRECT)
            if self.client < 0:
                log.error("PyBullet connection failed")
                return False
            self._is_setup = True
            log.info("Collision world ready (client=%d)", self.client)
            return True
        except Exception as e:
            log.error("Collision world setup failed: %s", e)
            return False

    def add_box(self, name: str, half_extents: Sequence[float], position: Sequence[float],
                layer: int = GROUND_LAYER) -> Collider:
        import pybullet as p

        self._require_setup()
        group = layer_mask(layer)
        shape = p.createCollisionShape(p.GEOM_BOX, halfExtents=list(half_extents),
                                       physicsClientId=self.client)
        body_id = p.createMultiBody(baseMass=0, baseCollisionShapeIndex=shape,
                                    basePosition=list(position), physicsClientId=self.client)
        p.setCollisionFilterGroupMask(body_id, -1, group, ALL_LAYERS, physicsClientId=self.client)

        collider = Collider(name=name, body_id=body_id, layer=layer,
                            position=list(position), half_extents=list(half_extents))
        self.colliders[name] = collider
        log.info("Added box '%s' on layer %d", name, layer)
        return collider

    def add_ground(self, height: float = 0.0, layer: int = GROUND_LAYER,
                   extent: float = 500.0, thickness: float = 0.5) -> Collider:
        """Wide flat slab whose top face sits at *height* on the up axis."""
        return self.add_box("ground", [extent, thickness, extent],
                            [0.0, height - thickness, 0.0], layer=layer)

    def raycast(self, origin, direction, max_distance: float, mask: int = ALL_LAYERS) -> bool:
        hits = self.raycast_batch(np.asarray(origin, dtype=np.float64)[None],
                                  np.asarray(direction, dtype=np.float64)[None],
                                  max_distance, mask)
        return bool(hits[0])

    def raycast_batch(self, origins: np.ndarray, directions: np.ndarray,
                      max_distance: float, mask: int = ALL_LAYERS) -> np.ndarray:
        """Hit flags for rays of length *max_distance*; zero directions never hit."""
        import pybullet as p

        self._require_setup()
        origins = np.asarray(origins, dtype=np.float64).reshape(-1, 3)
        directions = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
        lengths = np.linalg.norm(directions, axis=1)
        valid = lengths > 1e-9
        unit = np.zeros_like(directions)
        unit[valid] = directions[valid] / lengths[valid, None]
        targets = origins + unit * max_distance

        hits = np.zeros(len(origins), dtype=bool)
        for start in range(0, len(origins), RAY_BATCH_SIZE):
            stop = start + RAY_BATCH_SIZE
            results = p.rayTestBatch(
                rayFromPositions=origins[start:stop].tolist(),
                rayToPositions=targets[start:stop].tolist(),
                collisionFilterMask=int(mask),
                physicsClientId=self.client,
            )
            hits[start:stop] = [r[0] >= 0 for r in results]
        return hits & valid

    def cleanup(self):
        import pybullet as p
        if self.client is not None:
            p.disconnect(physicsClientId=self.client)
            self.client = None
            self._is_setup = False
            self.colliders.clear()
            log.info("Collision world cleaned up")

    def _require_setup(self) -> None:
        if not self._is_setup:
            raise RuntimeError("PhysicsWorld.setup() must succeed before use")
