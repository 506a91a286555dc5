"""Route resolution and fare computation core for the shuttle booking platform."""

__version__ = "0.1.0"
