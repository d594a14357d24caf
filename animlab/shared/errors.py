"""Exception hierarchy for clip, contact and trajectory configuration errors."""


class AnimlabError(ValueError):
    """Base class for configuration errors raised before any computation."""


class ClipError(AnimlabError):
    """Malformed clip data or an out-of-range frame lookup."""


class ContactConfigError(AnimlabError):
    """Invalid sensor id, threshold or normal for a contact function."""


class TrajectoryError(AnimlabError):
    """Trajectory requested for a frame that does not belong to the clip."""
