"""
#WHERE
    Imported by pipeline.py and tests.

#WHAT
    Contact Module — ray-cast contact labels per sensor joint, per frame and
    per mirror state.
"""

from .contact import ContactFunction, ContactModule, compute_contacts, pivot_transformations

__all__ = ["ContactFunction", "ContactModule", "compute_contacts", "pivot_transformations"]
