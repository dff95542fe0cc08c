"""rest-timer: a rest-period countdown for workout tracking."""

__version__ = "0.1.0"
