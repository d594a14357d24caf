"""
#WHERE
    Imported by contact.py (CollisionWorld protocol), pipeline.py and tests.

#WHAT
    Physics World Module — PyBullet collision world with layered static
    colliders and batched ray queries used for contact labelling.
"""

from .world import Collider, CollisionWorld, PhysicsWorld, layer_mask

__all__ = ["Collider", "CollisionWorld", "PhysicsWorld", "layer_mask"]
