"""animlab — contact labelling and trajectory windows for motion-capture clips."""

__version__ = "0.1.0"
